from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from lms_api.schemas.submission import SubmissionRead
from lms_api.schemas.user import UserBrief

AssignmentType = Literal["quiz", "project", "essay", "presentation", "other"]


class QuizQuestion(BaseModel):
    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=2)
    correct_answer: int = Field(ge=0)

    @model_validator(mode="after")
    def answer_in_options(self):
        if self.correct_answer >= len(self.options):
            raise ValueError("correct_answer must index one of the options")
        return self


class QuizQuestionRead(BaseModel):
    question: str
    options: list[str]
    # hidden from students
    correct_answer: Optional[int] = None


class Attachment(BaseModel):
    filename: str
    url: str
    file_type: Optional[str] = None


class AssignmentCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    instructions: str = Field(min_length=1)
    course_id: int
    type: AssignmentType
    max_points: int = Field(ge=1)
    due_date: datetime
    is_published: bool = False
    quiz_questions: list[QuizQuestion] = []
    attachments: list[Attachment] = []
    max_attempts: int = Field(default=1, ge=1)


class AssignmentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    instructions: Optional[str] = Field(default=None, min_length=1)
    type: Optional[AssignmentType] = None
    max_points: Optional[int] = Field(default=None, ge=1)
    due_date: Optional[datetime] = None
    quiz_questions: Optional[list[QuizQuestion]] = None
    attachments: Optional[list[Attachment]] = None
    max_attempts: Optional[int] = Field(default=None, ge=1)


class CourseRef(BaseModel):
    id: int
    title: str

    class Config:
        from_attributes = True


class AssignmentRead(BaseModel):
    id: int
    title: str
    description: str
    instructions: str
    course: CourseRef
    instructor: Optional[UserBrief] = None
    type: str
    max_points: int
    due_date: datetime
    is_published: bool
    publish_date: Optional[datetime] = None
    quiz_questions: list[QuizQuestionRead] = []
    attachments: list[Attachment] = []
    max_attempts: int
    created_at: datetime

    class Config:
        from_attributes = True


class AssignmentDetail(AssignmentRead):
    submissions: list[SubmissionRead] = []


class AssignmentPage(BaseModel):
    assignments: list[AssignmentRead]
    total_pages: int
    current_page: int
    total: int
