from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from lms_api.db.base_class import Base

class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)

    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    submission_date = Column(DateTime(timezone=True), nullable=False)

    # content
    text = Column(Text, nullable=True)
    answers = Column(JSON, nullable=False, default=list)
    attachments = Column(JSON, nullable=False, default=list)

    is_late = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default="submitted")
    attempt = Column(Integer, nullable=False, default=1)

    # Grade (nullable until graded)
    points = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)
    graded_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    graded_date = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )

    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User", back_populates="submissions", foreign_keys=[student_id])
    graded_by = relationship("User", foreign_keys=[graded_by_id])

    @property
    def content(self) -> dict:
        return {"text": self.text, "answers": self.answers, "attachments": self.attachments}

    @property
    def grade(self) -> dict | None:
        if self.points is None:
            return None
        return {
            "points": self.points,
            "feedback": self.feedback or "",
            "graded_by": self.graded_by,
            "graded_date": self.graded_date,
        }
