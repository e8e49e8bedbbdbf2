import os
from datetime import timedelta

# DEV defaults; override through environment variables in deployment.
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE = timedelta(days=int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7")))

DATABASE_URL = os.getenv("DATABASE_URL")  # None -> sqlite file next to the project
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]

# Pagination
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
NOTIFICATION_LIST_LIMIT = 20

RECENT_USERS_LIMIT = 5
