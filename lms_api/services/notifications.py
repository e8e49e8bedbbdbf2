"""Notification fan-out.

Every helper adds its notifications to the caller's session without
committing, so they land in the same transaction as the change that
triggered them.
"""
import logging

from sqlalchemy.orm import Session

from lms_api.models.assignment import Assignment
from lms_api.models.course import Course
from lms_api.models.notification import Notification
from lms_api.models.user import User

logger = logging.getLogger(__name__)


def create_notification(db: Session, **fields) -> Notification:
    notification = Notification(**fields)
    db.add(notification)
    return notification


def _fan_out(db: Session, recipients: list[User], **fields) -> int:
    db.add_all([Notification(recipient_id=r.id, **fields) for r in recipients])
    return len(recipients)


def _active_users_with_role(db: Session, role: str, exclude_id: int | None = None) -> list[User]:
    q = db.query(User).filter(User.role == role, User.status == "active")
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.all()


def notify_instructors_about_new_course(db: Session, course: Course, admin: User) -> int:
    instructors = _active_users_with_role(db, "instructor", exclude_id=admin.id)
    count = _fan_out(
        db,
        instructors,
        type="course_created",
        title="New Course Available",
        message=f'Admin {admin.full_name} has created a new course: "{course.title}"',
        related_course_id=course.id,
        related_user_id=admin.id,
        link=f"/courses/{course.id}",
        priority="medium",
    )
    logger.info("Notified %d instructors about new course %s", count, course.id)
    return count


def notify_students_about_new_assignment(
    db: Session, assignment: Assignment, course: Course, instructor: User
) -> int:
    students = [e.student for e in course.enrollments]
    if not students:
        logger.info("No students enrolled in course %s yet", course.id)
        return 0

    due = assignment.due_date.strftime("%Y-%m-%d")
    count = _fan_out(
        db,
        students,
        type="assignment_created",
        title="New Assignment Posted",
        message=(
            f'{instructor.full_name} has posted a new assignment "{assignment.title}" '
            f"for {course.title}. Due: {due}"
        ),
        related_assignment_id=assignment.id,
        related_course_id=course.id,
        related_user_id=instructor.id,
        link=f"/assignments/{assignment.id}",
        priority="high",
    )
    logger.info("Notified %d students about new assignment %s", count, assignment.id)
    return count


def notify_instructor_about_submission(
    db: Session, assignment: Assignment, student: User, instructor: User
) -> Notification:
    return create_notification(
        db,
        recipient_id=instructor.id,
        type="submission_received",
        title="New Assignment Submission",
        message=f'{student.full_name} has submitted "{assignment.title}"',
        related_assignment_id=assignment.id,
        related_user_id=student.id,
        link=f"/assignments/{assignment.id}",
        priority="medium",
    )


def notify_student_about_grade(
    db: Session, assignment: Assignment, student: User, grader: User, points: float
) -> Notification:
    return create_notification(
        db,
        recipient_id=student.id,
        type="assignment_graded",
        title="Assignment Graded",
        message=(
            f'Your assignment "{assignment.title}" has been graded. '
            f"Score: {points:g}/{assignment.max_points}"
        ),
        related_assignment_id=assignment.id,
        related_user_id=grader.id,
        link=f"/assignments/{assignment.id}",
        priority="high",
    )


def notify_instructor_about_enrollment(
    db: Session, course: Course, student: User, instructor: User
) -> Notification:
    return create_notification(
        db,
        recipient_id=instructor.id,
        type="new_enrollment",
        title="New Student Enrollment",
        message=f'{student.full_name} has enrolled in your course "{course.title}"',
        related_course_id=course.id,
        related_user_id=student.id,
        link=f"/courses/{course.id}",
        priority="low",
    )


def notify_students_about_published_course(db: Session, course: Course, publisher: User) -> int:
    students = _active_users_with_role(db, "student")
    count = _fan_out(
        db,
        students,
        type="course_published",
        title="New Course Published",
        message=f'{publisher.full_name} has published a new course: "{course.title}"',
        related_course_id=course.id,
        related_user_id=publisher.id,
        link=f"/courses/{course.id}",
        priority="medium",
    )
    logger.info("Notified %d students about published course %s", count, course.id)
    return count


def notify_user_about_course_assignment(
    db: Session, course: Course, assigned_user: User, assigned_by: User
) -> Notification:
    return create_notification(
        db,
        recipient_id=assigned_user.id,
        type="course_assigned",
        title="Course Assigned to You",
        message=f'{assigned_by.full_name} has assigned you to teach "{course.title}"',
        related_course_id=course.id,
        related_user_id=assigned_by.id,
        link=f"/courses/{course.id}",
        priority="high",
    )
