import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lms_api.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from lms_api.core.current_user import get_current_user, get_optional_user
from lms_api.core.dates import utcnow
from lms_api.core.filters import LIKE_ESCAPE, contains_pattern
from lms_api.core.deps import get_db
from lms_api.core.pagination import paginate
from lms_api.core.permissions import is_admin, require_staff
from lms_api.models.course import Course
from lms_api.models.course_tag import CourseTag
from lms_api.models.enrollment import Enrollment
from lms_api.models.user import User
from lms_api.schemas.common import Message, PublishState
from lms_api.schemas.course import (
    CourseCreate,
    CourseDetail,
    CoursePage,
    CourseRead,
    CourseUpdate,
    ProgressUpdate,
)
from lms_api.schemas.enrollment import MyCourse
from lms_api.services import notifications

logger = logging.getLogger(__name__)

router = APIRouter()


def _ensure_course_exists(db: Session, course_id: int) -> Course:
    course = db.get(Course, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course


def _can_manage(user: User | None, course: Course) -> bool:
    return is_admin(user) or (user is not None and course.instructor_id == user.id)


def _ensure_can_manage(user: User, course: Course, action: str = "manage") -> None:
    if not _can_manage(user, course):
        raise HTTPException(
            status_code=403,
            detail=f"Access denied. You can only {action} your own courses.",
        )


def _find_enrollment(db: Session, course_id: int, student_id: int) -> Enrollment | None:
    return (
        db.query(Enrollment)
        .filter(Enrollment.course_id == course_id, Enrollment.student_id == student_id)
        .first()
    )


def enroll_user(db: Session, course: Course, user: User, check_availability: bool = True) -> Enrollment:
    """Enroll ``user`` in ``course`` and notify the course instructor.

    Raises 400 when the user is already enrolled and, with
    ``check_availability``, when the course is unpublished or full.
    """
    if check_availability:
        if not course.is_published:
            raise HTTPException(status_code=400, detail="Course is not published yet")
        if len(course.enrollments) >= course.max_students:
            raise HTTPException(status_code=400, detail="Course is full")

    if _find_enrollment(db, course.id, user.id):
        raise HTTPException(status_code=400, detail="User is already enrolled in this course")

    enrollment = Enrollment(student_id=user.id, course_id=course.id, progress=0, completed_lessons=[])
    db.add(enrollment)

    if course.instructor_id != user.id and course.instructor is not None:
        notifications.notify_instructor_about_enrollment(db, course, user, course.instructor)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="User is already enrolled in this course")

    db.refresh(enrollment)
    logger.info("User %s enrolled in course %s", user.id, course.id)
    return enrollment


@router.get("", response_model=CoursePage)
def list_courses(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: str = "",
    category: str = "",
    level: str = "",
    published: bool = True,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    q = db.query(Course)

    # unpublished courses are only listed for their instructor or an admin
    if published or current_user is None or current_user.role not in ("admin", "instructor"):
        q = q.filter(Course.is_published.is_(True))
    elif current_user.role == "instructor":
        q = q.filter(or_(Course.is_published.is_(True), Course.instructor_id == current_user.id))

    if search:
        pattern = contains_pattern(search)
        q = q.filter(
            or_(
                Course.title.ilike(pattern, escape=LIKE_ESCAPE),
                Course.description.ilike(pattern, escape=LIKE_ESCAPE),
                Course.tag_rows.any(CourseTag.name.ilike(pattern, escape=LIKE_ESCAPE)),
            )
        )
    if category:
        q = q.filter(Course.category == category)
    if level:
        q = q.filter(Course.level == level)

    courses, total, total_pages = paginate(
        q.order_by(Course.created_at.desc(), Course.id.desc()), page, limit
    )
    return {
        "courses": courses,
        "total_pages": total_pages,
        "current_page": page,
        "total": total,
    }


@router.get("/me", response_model=list[MyCourse])
def my_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return (
        db.query(Enrollment)
        .filter(Enrollment.student_id == current_user.id)
        .order_by(Enrollment.enrollment_date.desc(), Enrollment.id.desc())
        .all()
    )


@router.get("/instructor/{instructor_id}", response_model=list[CourseRead])
def instructor_courses(
    instructor_id: int,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    q = db.query(Course).filter(Course.instructor_id == instructor_id)
    if not (is_admin(current_user) or (current_user is not None and current_user.id == instructor_id)):
        q = q.filter(Course.is_published.is_(True))
    return q.order_by(Course.created_at.desc(), Course.id.desc()).all()


@router.get("/{course_id}", response_model=CourseDetail)
def get_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    course = _ensure_course_exists(db, course_id)
    if not course.is_published and not _can_manage(current_user, course):
        raise HTTPException(status_code=404, detail="Course not found")
    return course


@router.post("", response_model=CourseRead, status_code=status.HTTP_201_CREATED)
def create_course(
    payload: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    course = Course(**payload.model_dump(), instructor_id=current_user.id)
    db.add(course)
    db.flush()

    if current_user.role == "admin":
        notifications.notify_instructors_about_new_course(db, course, current_user)

    db.commit()
    db.refresh(course)
    logger.info("User %s created course %s", current_user.id, course.id)
    return course


@router.put("/{course_id}", response_model=CourseRead)
def update_course(
    course_id: int,
    payload: CourseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    course = _ensure_course_exists(db, course_id)
    _ensure_can_manage(current_user, course, "edit")

    updates = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}

    new_instructor = None
    new_instructor_id = updates.pop("instructor_id", None)
    if new_instructor_id is not None and new_instructor_id != course.instructor_id:
        if not is_admin(current_user):
            raise HTTPException(status_code=403, detail="Only admins can reassign a course")
        new_instructor = db.get(User, new_instructor_id)
        if new_instructor is None or new_instructor.role != "instructor":
            raise HTTPException(status_code=400, detail="instructor_id must reference an instructor")
        course.instructor_id = new_instructor.id

    for field, value in updates.items():
        setattr(course, field, value)

    if new_instructor is not None:
        notifications.notify_user_about_course_assignment(db, course, new_instructor, current_user)

    db.commit()
    db.refresh(course)
    return course


@router.delete("/{course_id}", response_model=Message)
def delete_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    course = _ensure_course_exists(db, course_id)
    _ensure_can_manage(current_user, course, "delete")

    if course.enrollments:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete course with enrolled students. Please unenroll all students first.",
        )

    db.delete(course)
    db.commit()
    logger.info("User %s deleted course %s", current_user.id, course_id)
    return {"message": "Course deleted successfully"}


@router.post("/{course_id}/enroll", response_model=Message)
def enroll(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    course = _ensure_course_exists(db, course_id)
    enroll_user(db, course, current_user)
    return {"message": "Successfully enrolled in course"}


@router.post("/{course_id}/unenroll", response_model=Message)
def unenroll(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _ensure_course_exists(db, course_id)

    enrollment = _find_enrollment(db, course_id, current_user.id)
    if enrollment is not None:
        db.delete(enrollment)
        db.commit()
        logger.info("User %s unenrolled from course %s", current_user.id, course_id)

    return {"message": "Successfully unenrolled from course"}


@router.put("/{course_id}/progress", response_model=MyCourse)
def update_progress(
    course_id: int,
    payload: ProgressUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _ensure_course_exists(db, course_id)

    enrollment = _find_enrollment(db, course_id, current_user.id)
    if enrollment is None:
        raise HTTPException(status_code=403, detail="Not enrolled in this course")

    enrollment.progress = payload.progress
    if payload.completed_lessons is not None:
        enrollment.completed_lessons = list(payload.completed_lessons)

    db.commit()
    db.refresh(enrollment)
    return enrollment


@router.post("/{course_id}/publish", response_model=PublishState)
def toggle_publish(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    course = _ensure_course_exists(db, course_id)
    _ensure_can_manage(current_user, course, "publish")

    course.is_published = not course.is_published
    if course.is_published and course.published_date is None:
        course.published_date = utcnow()
        notifications.notify_students_about_published_course(db, course, current_user)

    db.commit()

    state = "published" if course.is_published else "unpublished"
    return {"message": f"Course {state} successfully", "is_published": course.is_published}
