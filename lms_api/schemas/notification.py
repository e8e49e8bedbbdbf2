from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class RelatedCourse(BaseModel):
    id: int
    title: str

    class Config:
        from_attributes = True


class RelatedAssignment(BaseModel):
    id: int
    title: str

    class Config:
        from_attributes = True


class RelatedUser(BaseModel):
    id: int
    first_name: str
    last_name: str

    class Config:
        from_attributes = True


class NotificationRead(BaseModel):
    id: int
    type: str
    title: str
    message: str
    is_read: bool
    link: Optional[str] = None
    priority: str
    related_course: Optional[RelatedCourse] = None
    related_assignment: Optional[RelatedAssignment] = None
    related_user: Optional[RelatedUser] = None
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationList(BaseModel):
    notifications: list[NotificationRead]
    unread_count: int


class NotificationMarked(BaseModel):
    message: str
    notification: NotificationRead
