from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from lms_api.schemas.user import SelfServiceRole, UserRead, _EmailNormalizer


class RegisterRequest(_EmailNormalizer):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: SelfServiceRole = "student"


class LoginRequest(_EmailNormalizer):
    email: EmailStr
    password: str = Field(min_length=1)


class AuthResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserRead


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    avatar: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6, max_length=128)
