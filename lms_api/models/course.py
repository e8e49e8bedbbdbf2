from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lms_api.db.base_class import Base
from lms_api.models.course_tag import CourseTag


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="Other")
    level: Mapped[str] = mapped_column(String(20), nullable=False, default="Beginner")

    duration_weeks: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    hours_per_week: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    instructor_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )

    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    instructor = relationship("User", foreign_keys=[instructor_id])

    enrollments = relationship(
        "Enrollment", back_populates="course", cascade="all, delete-orphan"
    )

    assignments = relationship(
        "Assignment", back_populates="course", cascade="all, delete-orphan"
    )

    tag_rows = relationship(
        "CourseTag",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="CourseTag.id",
    )

    @property
    def tags(self) -> list[str]:
        return [t.name for t in self.tag_rows]

    @tags.setter
    def tags(self, names) -> None:
        # reuse rows for tags that stay
        existing = {t.name: t for t in self.tag_rows}
        self.tag_rows = [existing.get(n) or CourseTag(name=n) for n in dict.fromkeys(names)]

    @property
    def enrolled_students(self):
        return self.enrollments
