from lms_api.db.base import Base
from lms_api.db.session import engine


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
