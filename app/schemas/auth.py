# app/schemas/auth.py
from pydantic import EmailStr, Field
from datetime import datetime
from app.models.user import UserRole
from app.schemas.common import ApiModel


class RegisterRequest(ApiModel):
    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=8, max_length=128)
    email: EmailStr
    role: UserRole = UserRole.CITIZEN   # CITIZEN | POLICE (ADMIN is created by scripts/setup/init_db.py)


class LoginRequest(ApiModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserOut(ApiModel):
    id: int
    username: str
    email: str
    role: str
    created_at: datetime


class UserResponse(ApiModel):
    success: bool = True
    user: UserOut


class LoginResponse(ApiModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user: UserOut
