from typing import Optional

from pydantic import BaseModel


class InstructorCourseStats(BaseModel):
    course_id: int
    course_title: str
    is_published: bool
    enrolled_students: int
    seats_left: int
    average_progress: Optional[float] = None
    total_assignments: int
    published_assignments: int
    total_submissions: int
    graded_submissions: int
    pending_submissions: int
    late_submissions: int
    average_points: Optional[float] = None
