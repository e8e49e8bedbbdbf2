from datetime import datetime

from pydantic import BaseModel

from lms_api.schemas.course import CourseRead


class MyCourse(BaseModel):
    course: CourseRead
    enrollment_date: datetime
    progress: int
    completed_lessons: list = []

    class Config:
        from_attributes = True
