import logging
from datetime import date, datetime, time, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from lms_api.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from lms_api.core.current_user import get_current_user
from lms_api.core.dates import as_utc, utcnow
from lms_api.core.deps import get_db
from lms_api.core.pagination import paginate
from lms_api.core.permissions import is_admin, require_staff, require_student
from lms_api.models.assignment import Assignment
from lms_api.models.course import Course
from lms_api.models.enrollment import Enrollment
from lms_api.models.submission import Submission
from lms_api.models.user import User
from lms_api.schemas.assignment import (
    AssignmentCreate,
    AssignmentDetail,
    AssignmentPage,
    AssignmentRead,
    AssignmentUpdate,
)
from lms_api.schemas.common import Message, PublishState
from lms_api.schemas.submission import (
    GradeCreate,
    GradeResult,
    SubmissionCreate,
    SubmissionRead,
    SubmitResult,
)
from lms_api.services import notifications

logger = logging.getLogger(__name__)

router = APIRouter()


def _ensure_assignment_exists(db: Session, assignment_id: int) -> Assignment:
    a = db.get(Assignment, assignment_id)
    if not a:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return a


def _can_manage(user: User, assignment: Assignment) -> bool:
    if is_admin(user):
        return True
    return user.id in (assignment.instructor_id, assignment.course.instructor_id)


def _ensure_can_manage(user: User, assignment: Assignment) -> None:
    if not _can_manage(user, assignment):
        raise HTTPException(status_code=403, detail="Access denied")


def _is_enrolled(db: Session, course_id: int, student_id: int) -> bool:
    return (
        db.query(Enrollment)
        .filter(Enrollment.course_id == course_id, Enrollment.student_id == student_id)
        .first()
        is not None
    )


def _publish(db: Session, assignment: Assignment, publisher: User) -> None:
    """Mark published; the first publication notifies enrolled students."""
    assignment.is_published = True
    if assignment.publish_date is None:
        assignment.publish_date = utcnow()
        notifications.notify_students_about_new_assignment(
            db, assignment, assignment.course, publisher
        )


@router.get("", response_model=AssignmentPage)
def list_assignments(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    course_id: int | None = None,
    due_date: date | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = db.query(Assignment).join(Course, Course.id == Assignment.course_id)

    if current_user.role == "instructor":
        q = q.filter(
            or_(
                Assignment.instructor_id == current_user.id,
                Course.instructor_id == current_user.id,
            )
        )
    elif current_user.role != "admin":
        enrolled_course_ids = select(Enrollment.course_id).where(
            Enrollment.student_id == current_user.id
        )
        q = q.filter(
            Assignment.course_id.in_(enrolled_course_ids),
            Assignment.is_published.is_(True),
        )

    if course_id is not None:
        q = q.filter(Assignment.course_id == course_id)

    if due_date is not None:
        start = datetime.combine(due_date, time.min, tzinfo=timezone.utc)
        q = q.filter(Assignment.due_date >= start, Assignment.due_date < start + timedelta(days=1))

    assignments, total, total_pages = paginate(
        q.order_by(Assignment.due_date.asc(), Assignment.id.asc()), page, limit
    )
    return {
        "assignments": assignments,
        "total_pages": total_pages,
        "current_page": page,
        "total": total,
    }


@router.get("/{assignment_id}", response_model=AssignmentDetail)
def get_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    assignment = _ensure_assignment_exists(db, assignment_id)

    if current_user.role in ("admin", "instructor"):
        _ensure_can_manage(current_user, assignment)
        return assignment

    # students: published assignments of enrolled courses, own submission only
    if not assignment.is_published or not _is_enrolled(db, assignment.course_id, current_user.id):
        raise HTTPException(status_code=403, detail="Access denied")

    detail = AssignmentDetail.model_validate(assignment)
    detail.submissions = [s for s in detail.submissions if s.student.id == current_user.id]
    for q in detail.quiz_questions:
        q.correct_answer = None
    return detail


@router.post("", response_model=AssignmentRead, status_code=status.HTTP_201_CREATED)
def create_assignment(
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    course = db.get(Course, payload.course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")

    if not is_admin(current_user) and course.instructor_id != current_user.id:
        raise HTTPException(
            status_code=403,
            detail="Access denied. You can only create assignments for your courses.",
        )

    data = payload.model_dump(exclude={"is_published"})
    data["due_date"] = as_utc(payload.due_date)

    a = Assignment(**data, course=course, instructor_id=current_user.id, is_published=False)
    db.add(a)
    db.flush()

    if payload.is_published:
        _publish(db, a, current_user)

    db.commit()
    db.refresh(a)
    logger.info("User %s created assignment %s in course %s", current_user.id, a.id, course.id)
    return a


@router.put("/{assignment_id}", response_model=AssignmentRead)
def update_assignment(
    assignment_id: int,
    payload: AssignmentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    assignment = _ensure_assignment_exists(db, assignment_id)
    _ensure_can_manage(current_user, assignment)

    updates = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if "due_date" in updates:
        updates["due_date"] = as_utc(updates["due_date"])

    if "max_points" in updates:
        top_grade = (
            db.query(func.max(Submission.points))
            .filter(Submission.assignment_id == assignment.id)
            .scalar()
        )
        if top_grade is not None and updates["max_points"] < top_grade:
            raise HTTPException(
                status_code=400,
                detail=f"max_points cannot be lower than an existing grade of {top_grade:g}",
            )

    for field, value in updates.items():
        setattr(assignment, field, value)

    db.commit()
    db.refresh(assignment)
    return assignment


@router.delete("/{assignment_id}", response_model=Message)
def delete_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    assignment = _ensure_assignment_exists(db, assignment_id)
    _ensure_can_manage(current_user, assignment)

    if assignment.submissions:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete assignment with submissions. Please grade all submissions first.",
        )

    db.delete(assignment)
    db.commit()
    return {"message": "Assignment deleted successfully"}


@router.post("/{assignment_id}/submit", response_model=SubmitResult)
def submit_assignment(
    assignment_id: int,
    payload: SubmissionCreate,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    assignment = _ensure_assignment_exists(db, assignment_id)

    if not assignment.is_published:
        raise HTTPException(status_code=400, detail="Assignment is not published yet")

    if not _is_enrolled(db, assignment.course_id, me.id):
        raise HTTPException(
            status_code=403,
            detail="You must be enrolled in the course to submit assignments",
        )

    now = utcnow()
    is_late = now > as_utc(assignment.due_date)
    content = payload.content.model_dump()

    existing = (
        db.query(Submission)
        .filter(Submission.assignment_id == assignment_id, Submission.student_id == me.id)
        .first()
    )

    if existing:
        if assignment.max_attempts == 1:
            raise HTTPException(
                status_code=400,
                detail="Assignment already submitted. Multiple attempts not allowed.",
            )
        if existing.attempt >= assignment.max_attempts:
            raise HTTPException(status_code=400, detail="Maximum number of attempts reached")

        # the latest attempt replaces the previous one, grade included
        sub = existing
        sub.attempt += 1
        sub.points = None
        sub.feedback = None
        sub.graded_by_id = None
        sub.graded_date = None
    else:
        sub = Submission(assignment_id=assignment_id, student_id=me.id, attempt=1)
        db.add(sub)

    sub.submission_date = now
    sub.text = content["text"]
    sub.answers = content["answers"]
    sub.attachments = content["attachments"]
    sub.is_late = is_late
    sub.status = "submitted"

    instructor = assignment.course.instructor
    if instructor is not None:
        notifications.notify_instructor_about_submission(db, assignment, me, instructor)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(sub)
    logger.info("Student %s submitted assignment %s (attempt %s)", me.id, assignment_id, sub.attempt)
    return {
        "message": "Assignment submitted successfully",
        "is_late": is_late,
        "submission": sub,
    }


@router.get("/{assignment_id}/submissions", response_model=list[SubmissionRead])
def list_submissions(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    assignment = _ensure_assignment_exists(db, assignment_id)
    _ensure_can_manage(current_user, assignment)

    return (
        db.query(Submission)
        .filter(Submission.assignment_id == assignment_id)
        .order_by(Submission.submission_date.asc(), Submission.id.asc())
        .all()
    )


def _grade(
    db: Session, assignment_id: int, submission_id: int, payload: GradeCreate, grader: User
) -> dict:
    assignment = _ensure_assignment_exists(db, assignment_id)
    _ensure_can_manage(grader, assignment)

    sub = db.get(Submission, submission_id)
    if not sub or sub.assignment_id != assignment.id:
        raise HTTPException(status_code=404, detail="Submission not found")

    if payload.points > assignment.max_points:
        raise HTTPException(
            status_code=400,
            detail=f"Points cannot exceed maximum of {assignment.max_points}",
        )

    sub.points = payload.points
    sub.feedback = payload.feedback or ""
    sub.graded_by_id = grader.id
    sub.graded_date = utcnow()
    sub.status = "graded"

    notifications.notify_student_about_grade(db, assignment, sub.student, grader, payload.points)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(sub)
    return {"message": "Assignment graded successfully", "grade": sub.grade}


@router.post("/{assignment_id}/grade/{submission_id}", response_model=GradeResult)
def grade_submission(
    assignment_id: int,
    submission_id: int,
    payload: GradeCreate,
    db: Session = Depends(get_db),
    grader: User = Depends(require_staff),
):
    return _grade(db, assignment_id, submission_id, payload, grader)


@router.put("/{assignment_id}/submissions/{submission_id}/grade", response_model=GradeResult)
def regrade_submission(
    assignment_id: int,
    submission_id: int,
    payload: GradeCreate,
    db: Session = Depends(get_db),
    grader: User = Depends(require_staff),
):
    return _grade(db, assignment_id, submission_id, payload, grader)


@router.post("/{assignment_id}/publish", response_model=PublishState)
def toggle_publish(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    assignment = _ensure_assignment_exists(db, assignment_id)
    _ensure_can_manage(current_user, assignment)

    if assignment.is_published:
        assignment.is_published = False
    else:
        _publish(db, assignment, current_user)

    db.commit()

    state = "published" if assignment.is_published else "unpublished"
    return {"message": f"Assignment {state} successfully", "is_published": assignment.is_published}
