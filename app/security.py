# app/security.py
"""
Session/Role Gate: FastAPI dependencies for authenticated routes.

    user = Depends(get_current_user)                 # any signed-in role
    user = Depends(require_role(UserRole.POLICE))    # exactly that role

Roles are not hierarchical: ADMIN does not pass a CITIZEN or POLICE check.
Every rejection is an UnauthorizedError (HTTP 401).
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from app.database import get_db
from app.errors import UnauthorizedError
from app.models.user import User, UserRole
from app.services.auth_service import user_from_token
from app.utils.logger import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()
    return user_from_token(db, credentials.credentials)


def require_role(role: UserRole):
    """Dependency factory: the current user must hold exactly this role."""

    def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role != role.value:
            logger.warning(f"[AUTH] user={user.id} role={user.role} denied (needs {role.value})")
            raise UnauthorizedError()
        return user

    dependency.__name__ = f"require_{role.value.lower()}"
    return dependency
