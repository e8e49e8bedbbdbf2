import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lms_api.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, RECENT_USERS_LIMIT
from lms_api.core.current_user import get_current_user
from lms_api.core.deps import get_db
from lms_api.core.filters import LIKE_ESCAPE, contains_pattern
from lms_api.core.pagination import paginate
from lms_api.core.permissions import ensure_admin_or_self, require_admin
from lms_api.core.security import hash_password
from lms_api.models.assignment import Assignment
from lms_api.models.course import Course
from lms_api.models.user import User
from lms_api.routers.courses import enroll_user
from lms_api.schemas.common import Message
from lms_api.schemas.user import UserCreate, UserDetail, UserPage, UserRead, UserStats, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("", response_model=UserPage)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: str = "",
    role: str = "",
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    q = db.query(User)
    if search:
        pattern = contains_pattern(search)
        q = q.filter(
            or_(
                User.first_name.ilike(pattern, escape=LIKE_ESCAPE),
                User.last_name.ilike(pattern, escape=LIKE_ESCAPE),
                User.email.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if role:
        q = q.filter(User.role == role)

    users, total, total_pages = paginate(q.order_by(User.created_at.desc(), User.id.desc()), page, limit)
    return {
        "users": users,
        "total_pages": total_pages,
        "current_page": page,
        "total": total,
    }


@router.get("/stats/overview", response_model=UserStats)
def user_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    total_users = db.query(func.count(User.id)).scalar() or 0
    active_users = (
        db.query(func.count(User.id)).filter(User.status == "active").scalar()
    ) or 0

    by_role = (
        db.query(User.role, func.count(User.id))
        .group_by(User.role)
        .order_by(User.role.asc())
        .all()
    )

    recent_users = (
        db.query(User)
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(RECENT_USERS_LIMIT)
        .all()
    )

    return {
        "total_users": total_users,
        "active_users": active_users,
        "inactive_users": total_users - active_users,
        "users_by_role": [{"role": r, "count": c} for r, c in by_role],
        "recent_users": recent_users,
    }


@router.get("/{user_id}", response_model=UserDetail)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_admin_or_self(current_user, user_id)
    return _get_user_or_404(db, user_id)


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "User with this email already exists"}},
)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=400, detail="User with this email already exists")

    user = User(
        email=payload.email,
        hashed_password=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=payload.role,
        status=payload.status,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Admin %s created user %s", admin.id, user.id)
    return user


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_admin_or_self(current_user, user_id)
    user = _get_user_or_404(db, user_id)

    updates = payload.model_dump(exclude_unset=True)
    # Non-admin users cannot change role or status
    if current_user.role != "admin":
        updates.pop("role", None)
        updates.pop("status", None)

    for field, value in updates.items():
        if value is not None:
            setattr(user, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Email already exists")

    db.refresh(user)
    return user


@router.delete("/{user_id}", response_model=Message)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if admin.id == user_id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    user = _get_user_or_404(db, user_id)

    teaches = (
        db.query(Course.id).filter(Course.instructor_id == user.id).first() is not None
        or db.query(Assignment.id).filter(Assignment.instructor_id == user.id).first() is not None
    )
    if teaches:
        raise HTTPException(
            status_code=400,
            detail="User still instructs courses or assignments. Reassign them first.",
        )

    db.delete(user)
    db.commit()
    logger.info("Admin %s deleted user %s", admin.id, user_id)
    return {"message": "User deleted successfully"}


@router.post("/{user_id}/enroll/{course_id}", response_model=Message)
def enroll_user_in_course(
    user_id: int,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_admin_or_self(current_user, user_id)
    user = _get_user_or_404(db, user_id)

    course = db.get(Course, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")

    enroll_user(db, course, user, check_availability=current_user.role != "admin")
    return {"message": "Successfully enrolled in course"}
