import os
from datetime import datetime, timedelta, timezone

TEST_DB_FILE = "test_lms.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"

# must be set before the app module creates its engine
os.environ.setdefault("DATABASE_URL", TEST_DB_URL)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from lms_api.core.deps import get_db  # noqa: E402
from lms_api.core.security import hash_password  # noqa: E402
from lms_api.db.base import Base  # noqa: E402
from lms_api.main import app  # noqa: E402
from lms_api.models.assignment import Assignment  # noqa: E402
from lms_api.models.course import Course  # noqa: E402
from lms_api.models.course_tag import CourseTag  # noqa: E402
from lms_api.models.enrollment import Enrollment  # noqa: E402
from lms_api.models.notification import Notification  # noqa: E402
from lms_api.models.submission import Submission  # noqa: E402
from lms_api.models.user import User  # noqa: E402

PASSWORD = "password123"
PASSWORD_HASH = hash_password(PASSWORD)

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def login(client, email: str, password: str = PASSWORD) -> str:
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["token"]


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


def _user(email: str, first: str, last: str, role: str, status: str = "active") -> User:
    return User(
        email=email,
        first_name=first,
        last_name=last,
        role=role,
        status=status,
        hashed_password=PASSWORD_HASH,
    )


@pytest.fixture(autouse=True)
def seed():
    """Seed a clean minimal dataset for each test and return its ids."""
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        db.query(Notification).delete()
        db.query(Submission).delete()
        db.query(Enrollment).delete()
        db.query(Assignment).delete()
        db.query(CourseTag).delete()
        db.query(Course).delete()
        db.query(User).delete()
        db.commit()

        admin = _user("admin@example.com", "Ada", "Admin", "admin")
        instructor = _user("instructor1@example.com", "Ian", "Instructor", "instructor")
        other_instructor = _user("instructor2@example.com", "Ines", "Other", "instructor")
        student = _user("student1@example.com", "Sam", "Student", "student")
        other_student = _user("student2@example.com", "Sue", "Second", "student")
        inactive = _user("inactive@example.com", "Ivy", "Inactive", "student", status="inactive")
        db.add_all([admin, instructor, other_instructor, student, other_student, inactive])
        db.commit()

        # Published course with the first student enrolled
        course = Course(
            title="Intro to Python",
            description="Basics of the language",
            category="Programming",
            level="Beginner",
            duration_weeks=4,
            hours_per_week=3,
            max_students=30,
            price=0,
            tags=["python", "basics"],
            instructor_id=instructor.id,
            is_published=True,
            published_date=datetime.now(timezone.utc),
        )
        draft = Course(
            title="Advanced Design",
            description="Work in progress",
            category="Design",
            level="Advanced",
            duration_weeks=6,
            hours_per_week=2,
            max_students=10,
            price=49.0,
            tags=[],
            instructor_id=instructor.id,
            is_published=False,
        )
        db.add_all([course, draft])
        db.commit()

        db.add(Enrollment(course_id=course.id, student_id=student.id, progress=0, completed_lessons=[]))
        db.commit()

        # Published assignment (future due date)
        assignment = Assignment(
            course_id=course.id,
            instructor_id=instructor.id,
            title="HW1",
            description="First homework",
            instructions="Answer every question",
            type="quiz",
            max_points=100,
            due_date=datetime.now(timezone.utc) + timedelta(days=1),
            is_published=True,
            publish_date=datetime.now(timezone.utc),
            quiz_questions=[
                {"question": "2 + 2?", "options": ["3", "4"], "correct_answer": 1},
            ],
            attachments=[],
            max_attempts=1,
        )
        db.add(assignment)
        db.commit()

        yield {
            "admin": admin.id,
            "instructor": instructor.id,
            "other_instructor": other_instructor.id,
            "student": student.id,
            "other_student": other_student.id,
            "inactive": inactive.id,
            "course": course.id,
            "draft": draft.id,
            "assignment": assignment.id,
        }
    finally:
        db.close()


@pytest.fixture()
def client():
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def tokens(client):
    return {
        "admin": login(client, "admin@example.com"),
        "instructor": login(client, "instructor1@example.com"),
        "other_instructor": login(client, "instructor2@example.com"),
        "student": login(client, "student1@example.com"),
        "other_student": login(client, "student2@example.com"),
    }
