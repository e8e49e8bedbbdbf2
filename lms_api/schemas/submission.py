from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from lms_api.schemas.user import UserBrief


class SubmissionAttachment(BaseModel):
    filename: str
    url: str


class SubmissionContent(BaseModel):
    text: Optional[str] = None
    answers: list = []
    attachments: list[SubmissionAttachment] = []


class SubmissionCreate(BaseModel):
    content: SubmissionContent = SubmissionContent()


class GradeRead(BaseModel):
    points: float
    feedback: str = ""
    graded_by: Optional[UserBrief] = None
    graded_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubmissionRead(BaseModel):
    id: int
    assignment_id: int
    student: UserBrief
    submission_date: datetime
    content: SubmissionContent
    is_late: bool
    status: str
    attempt: int
    grade: Optional[GradeRead] = None

    class Config:
        from_attributes = True


class SubmitResult(BaseModel):
    message: str
    is_late: bool
    submission: SubmissionRead


class GradeCreate(BaseModel):
    points: float = Field(ge=0)
    feedback: Optional[str] = None


class GradeResult(BaseModel):
    message: str
    grade: GradeRead
