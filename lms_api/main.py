import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lms_api.core.config import CORS_ORIGINS, ENVIRONMENT
from lms_api.core.dates import utcnow
from lms_api.core.errors import register_exception_handlers
from lms_api.core.logging_middleware import LoggingMiddleware
from lms_api.db.init_db import init_db
from lms_api.db.session import database_is_up

from lms_api.routers.assignments import router as assignments_router
from lms_api.routers.auth import router as auth_router
from lms_api.routers.courses import router as courses_router
from lms_api.routers.instructor_dashboard import router as instructor_dashboard_router
from lms_api.routers.notifications import router as notifications_router
from lms_api.routers.users import router as users_router

logging.basicConfig(level=logging.INFO)

app = FastAPI(title="LMS API")

# Middleware
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

register_exception_handlers(app)


@app.get("/")
def root():
    return {
        "message": "LMS API Server is running!",
        "environment": ENVIRONMENT,
        "endpoints": [
            "POST /api/auth/login",
            "POST /api/auth/register",
            "GET /api/auth/profile",
            "GET /api/courses",
            "GET /api/assignments",
            "GET /api/notifications",
        ],
    }


# Health checks
@app.get("/health")
def health():
    return {"status": "OK", "message": "LMS Server is running", "timestamp": utcnow().isoformat()}


@app.get("/api/health")
def api_health():
    return {
        "status": "OK",
        "message": "LMS API is running",
        "timestamp": utcnow().isoformat(),
        "environment": ENVIRONMENT,
        "database": "connected" if database_is_up() else "unavailable",
    }


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Include routers
app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
app.include_router(users_router, prefix="/api/users", tags=["users"])
app.include_router(courses_router, prefix="/api/courses", tags=["courses"])
app.include_router(assignments_router, prefix="/api/assignments", tags=["assignments"])
app.include_router(notifications_router, prefix="/api/notifications", tags=["notifications"])

# Instructor dashboard (no prefix; route already defines full path)
app.include_router(instructor_dashboard_router)
