# app/services/token_service.py
"""
Verification token primitives shared by vehicles and documents.

Tokens are uuid4 strings. Documents and vehicles keep tokens in separate
columns, but a token is only handed out if neither namespace already holds it,
so a lookup can never match both. Collisions are reported, never retried.
"""

import uuid
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from app.errors import StoreError, TokenCollisionError
from app.models.document import Document
from app.models.vehicle import Vehicle
from app.utils.logger import get_logger

logger = get_logger(__name__)


def new_token() -> str:
    return str(uuid.uuid4())


def token_in_use(db: Session, token: str) -> bool:
    """True if the token exists in the document or the vehicle namespace."""
    if db.query(Document.id).filter(Document.token == token).first():
        return True
    return db.query(Vehicle.id).filter(Vehicle.token == token).first() is not None


def claim_token(db: Session) -> str:
    """Generate a token that is free in both namespaces."""
    token = new_token()
    if token_in_use(db, token):
        logger.error(f"[TOKEN] Generated token {token} already exists")
        raise TokenCollisionError(f"Token {token} is already in use")
    return token


def commit_token_record(db: Session, record, action: str):
    """
    Commit a freshly tokened row. A unique-constraint hit on the token column
    becomes TokenCollisionError; any other store failure becomes StoreError.
    The session is rolled back in both cases so nothing partial is persisted.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if "token" in str(e.orig).lower():
            logger.error(f"[TOKEN] Unique token violation while trying to {action}: {e.orig}")
            raise TokenCollisionError(f"Token collision while trying to {action}") from e
        logger.error(f"[STORE] Integrity error while trying to {action}: {e.orig}")
        raise StoreError(f"Could not {action}") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[STORE] Failed to {action}: {e}", exc_info=True)
        raise StoreError(f"Could not {action}") from e
    db.refresh(record)
    return record
