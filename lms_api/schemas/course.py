from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from lms_api.schemas.user import UserBrief

Category = Literal["Programming", "Design", "Business", "Marketing", "Data Science", "Other"]
Level = Literal["Beginner", "Intermediate", "Advanced"]


class CourseCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    category: Category
    level: Level
    duration_weeks: int = Field(ge=1)
    hours_per_week: int = Field(ge=1)
    max_students: int = Field(ge=1)
    price: float = Field(ge=0)
    tags: list[str] = []


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[Category] = None
    level: Optional[Level] = None
    duration_weeks: Optional[int] = Field(default=None, ge=1)
    hours_per_week: Optional[int] = Field(default=None, ge=1)
    max_students: Optional[int] = Field(default=None, ge=1)
    price: Optional[float] = Field(default=None, ge=0)
    tags: Optional[list[str]] = None
    # admin only
    instructor_id: Optional[int] = None


class EnrolledStudent(BaseModel):
    student: UserBrief
    enrollment_date: datetime
    progress: int
    completed_lessons: list = []

    class Config:
        from_attributes = True


class CourseRead(BaseModel):
    id: int
    title: str
    description: str
    category: str
    level: str
    duration_weeks: int
    hours_per_week: int
    max_students: int
    price: float
    tags: list[str]
    instructor: Optional[UserBrief] = None
    is_published: bool
    published_date: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CourseDetail(CourseRead):
    enrolled_students: list[EnrolledStudent] = []


class CoursePage(BaseModel):
    courses: list[CourseRead]
    total_pages: int
    current_page: int
    total: int


class ProgressUpdate(BaseModel):
    progress: int = Field(ge=0, le=100)
    completed_lessons: Optional[list] = None
