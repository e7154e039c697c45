# app/services/auth_service.py
"""
Credential handling: registration, login and signed session tokens.
Passwords are hashed with Argon2id; sessions are HS256 JWTs carrying the
user id and role, re-checked against the users table on every request.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import StoreError, UnauthorizedError, ValidationError
from app.models.user import User, UserRole
from app.utils.logger import get_logger

logger = get_logger(__name__)

JWT_ALGORITHM = "HS256"
SELF_REGISTER_ROLES = {UserRole.CITIZEN, UserRole.POLICE}

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def create_user(db: Session, username: str, password: str, email: str, role: UserRole) -> User:
    """Insert a user with a hashed password. Duplicate usernames are a ValidationError."""
    if db.query(User.id).filter(User.username == username).first():
        raise ValidationError("User already exists")

    user = User(
        username=username,
        password_hash=hash_password(password),
        email=email,
        role=UserRole(role).value,
        created_at=datetime.utcnow(),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValidationError("User already exists") from e
    db.refresh(user)
    logger.info(f"[AUTH] Created user {user.username} role={user.role}")
    return user


def register_user(db: Session, username: str, password: str, email: str, role: UserRole) -> User:
    """Public sign-up. Only citizens and police officers may register themselves."""
    if UserRole(role) not in SELF_REGISTER_ROLES:
        raise ValidationError("Role not allowed for self-registration")
    return create_user(db, username, password, email, role)


def authenticate(db: Session, username: str, password: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if not user or not verify_password(password, user.password_hash):
        logger.warning(f"[AUTH] Failed login for username={username!r}")
        raise UnauthorizedError("Invalid username or password")

    if _hasher.check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError("Could not update password hash") from e
    return user


def create_access_token(user: User, expires_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user.id),
        "role": user.role,
        "iat": now,
        "exp": expires,
    }
    return jwt.encode(payload, settings.AUTH_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.AUTH_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.info(f"[AUTH] Rejected session token: {e}")
        raise UnauthorizedError() from e


def user_from_token(db: Session, token: str) -> User:
    """Resolve the session token to a live user row. Deleted users are rejected."""
    payload = decode_access_token(token)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError) as e:
        raise UnauthorizedError() from e

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UnauthorizedError()
    return user
