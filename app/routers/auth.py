# app/routers/auth.py
"""Registration, login and the current-session endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User
from app.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, UserOut, UserResponse
from app.security import get_current_user
from app.services.auth_service import authenticate, create_access_token, register_user

router = APIRouter()


@router.post("/auth/register", response_model=LoginResponse, summary="Create a citizen or police account")
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Registers the account and signs it in straight away."""
    user = register_user(db, body.username, body.password, body.email, body.role)
    return LoginResponse(access_token=create_access_token(user), user=UserOut.model_validate(user))


@router.post("/auth/login", response_model=LoginResponse, summary="Sign in with username and password")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate(db, body.username, body.password)
    return LoginResponse(access_token=create_access_token(user), user=UserOut.model_validate(user))


@router.get("/auth/me", response_model=UserResponse, summary="Current session user")
def me(user: User = Depends(get_current_user)):
    return UserResponse(user=UserOut.model_validate(user))
