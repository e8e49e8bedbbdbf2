from lms_api.db.base_class import Base  # noqa: F401

# import models so SQLAlchemy registers them on Base.metadata
from lms_api.models import (  # noqa: F401
    assignment,
    course,
    course_tag,
    enrollment,
    notification,
    submission,
    user,
)
