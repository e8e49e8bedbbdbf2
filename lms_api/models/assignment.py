from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from lms_api.db.base_class import Base


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    instructor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    instructions = Column(Text, nullable=False)
    type = Column(String(20), nullable=False, default="other")
    max_points = Column(Integer, nullable=False, default=100)
    due_date = Column(DateTime(timezone=True), nullable=False)

    is_published = Column(Boolean, nullable=False, default=False)
    publish_date = Column(DateTime(timezone=True), nullable=True)

    # [{"question": str, "options": [str], "correct_answer": int}]
    quiz_questions = Column(JSON, nullable=False, default=list)
    # [{"filename": str, "url": str, "file_type": str | None}]
    attachments = Column(JSON, nullable=False, default=list)
    max_attempts = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    course = relationship("Course", back_populates="assignments")
    instructor = relationship("User", foreign_keys=[instructor_id])

    submissions = relationship("Submission", back_populates="assignment", cascade="all, delete-orphan")
