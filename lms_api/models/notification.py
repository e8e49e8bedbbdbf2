from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import relationship

from lms_api.db.base_class import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    type = Column(String(30), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)

    related_course_id = Column(Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    related_assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="SET NULL"), nullable=True)
    related_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    is_read = Column(Boolean, nullable=False, default=False)
    link = Column(String(500), nullable=True)
    priority = Column(String(10), nullable=False, default="medium")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_notifications_recipient_read_created", "recipient_id", "is_read", "created_at"),
    )

    recipient = relationship("User", back_populates="notifications", foreign_keys=[recipient_id])
    related_course = relationship("Course")
    related_assignment = relationship("Assignment")
    related_user = relationship("User", foreign_keys=[related_user_id])
