from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from lms_api.db.base_class import Base


class CourseTag(Base):
    __tablename__ = "course_tags"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(100), nullable=False)

    __table_args__ = (
        UniqueConstraint("course_id", "name", name="uq_course_tags_course_name"),
    )

    course = relationship("Course", back_populates="tag_rows")
