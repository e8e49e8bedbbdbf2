from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

Role = Literal["admin", "instructor", "student", "content_creator"]
SelfServiceRole = Literal["instructor", "student", "content_creator"]
Status = Literal["active", "inactive"]


class _EmailNormalizer(BaseModel):
    @field_validator("email", check_fields=False)
    @classmethod
    def normalize_email(cls, v):
        return v.lower() if v is not None else v


class UserCreate(_EmailNormalizer):
    """Admin-side user creation."""

    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: Role = "student"
    status: Status = "active"


class UserUpdate(_EmailNormalizer):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    avatar: Optional[str] = None
    role: Optional[Role] = None
    status: Optional[Status] = None


class UserBrief(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: EmailStr

    class Config:
        from_attributes = True


class EnrolledCourse(BaseModel):
    course_id: int
    enrollment_date: datetime
    progress: int

    class Config:
        from_attributes = True


class UserRead(BaseModel):
    id: int
    email: EmailStr
    first_name: str
    last_name: str
    role: str
    status: str
    avatar: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UserDetail(UserRead):
    enrolled_courses: list[EnrolledCourse] = []


class UserPage(BaseModel):
    users: list[UserRead]
    total_pages: int
    current_page: int
    total: int


class RoleCount(BaseModel):
    role: str
    count: int


class UserStats(BaseModel):
    total_users: int
    active_users: int
    inactive_users: int
    users_by_role: list[RoleCount]
    recent_users: list[UserRead]
