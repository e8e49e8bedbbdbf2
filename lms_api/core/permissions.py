from fastapi import Depends, HTTPException, status

from lms_api.core.current_user import get_current_user
from lms_api.models.user import User


def require_roles(*roles: str):
    """Dependency factory: the current user must hold one of ``roles``."""

    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Requires role: {', '.join(roles)}",
            )
        return current_user

    return checker


require_admin = require_roles("admin")
require_instructor = require_roles("instructor")
require_staff = require_roles("instructor", "admin")
require_student = require_roles("student")


def is_admin(user: User | None) -> bool:
    return user is not None and user.role == "admin"


def ensure_admin_or_self(current_user: User, user_id: int) -> None:
    if current_user.role != "admin" and current_user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
