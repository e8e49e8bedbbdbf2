from fastapi import APIRouter, Depends
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from lms_api.core.deps import get_db
from lms_api.core.permissions import require_instructor
from lms_api.models.assignment import Assignment
from lms_api.models.course import Course
from lms_api.models.enrollment import Enrollment
from lms_api.models.submission import Submission
from lms_api.models.user import User
from lms_api.schemas.instructor_dashboard import InstructorCourseStats

router = APIRouter(tags=["instructor"])


def _count_if(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def _rounded(value):
    return round(float(value), 2) if value is not None else None


@router.get("/api/instructor/dashboard", response_model=list[InstructorCourseStats])
def instructor_dashboard(
    db: Session = Depends(get_db),
    me: User = Depends(require_instructor),
):
    """Per-course enrolment, assignment and grading figures for the caller's courses."""
    courses = (
        db.query(Course)
        .filter(Course.instructor_id == me.id)
        .order_by(Course.id.asc())
        .all()
    )
    course_ids = [c.id for c in courses]
    if not course_ids:
        return []

    enrolment_rows = (
        db.query(Enrollment.course_id, func.count(Enrollment.id), func.avg(Enrollment.progress))
        .filter(Enrollment.course_id.in_(course_ids))
        .group_by(Enrollment.course_id)
        .all()
    )
    enrolments = {cid: (count, avg) for cid, count, avg in enrolment_rows}

    assignment_rows = (
        db.query(
            Assignment.course_id,
            func.count(Assignment.id),
            _count_if(Assignment.is_published.is_(True)),
        )
        .filter(Assignment.course_id.in_(course_ids))
        .group_by(Assignment.course_id)
        .all()
    )
    assignments = {cid: (total, published) for cid, total, published in assignment_rows}

    submission_rows = (
        db.query(
            Assignment.course_id,
            func.count(Submission.id),
            _count_if(Submission.status == "graded"),
            _count_if(Submission.is_late.is_(True)),
            func.avg(Submission.points),
        )
        .join(Assignment, Submission.assignment_id == Assignment.id)
        .filter(Assignment.course_id.in_(course_ids))
        .group_by(Assignment.course_id)
        .all()
    )
    submissions = {row[0]: row[1:] for row in submission_rows}

    rows: list[InstructorCourseStats] = []
    for course in courses:
        enrolled, avg_progress = enrolments.get(course.id, (0, None))
        total_assignments, published_assignments = assignments.get(course.id, (0, 0))
        total_subs, graded, late, avg_points = submissions.get(course.id, (0, 0, 0, None))

        rows.append(
            InstructorCourseStats(
                course_id=course.id,
                course_title=course.title,
                is_published=course.is_published,
                enrolled_students=enrolled,
                seats_left=max(course.max_students - enrolled, 0),
                average_progress=_rounded(avg_progress),
                total_assignments=total_assignments,
                published_assignments=int(published_assignments),
                total_submissions=total_subs,
                graded_submissions=int(graded),
                pending_submissions=total_subs - int(graded),
                late_submissions=int(late),
                average_points=_rounded(avg_points),
            )
        )

    return rows
