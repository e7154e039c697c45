# app/services/admin_service.py
"""
Administrator user management: listing, detail view and cascading delete.
The delete removes the user's licence documents, the documents of the user's
vehicles, the vehicles and finally the user, all in one transaction.
"""

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from app.errors import NotFoundError, StoreError
from app.models.document import Document
from app.models.user import User
from app.models.vehicle import Vehicle
from app.utils.logger import get_logger

logger = get_logger(__name__)


def list_users_with_counts(db: Session) -> list[dict]:
    """All users, newest first, with vehicle and document counts."""
    vehicle_counts = dict(
        db.query(Vehicle.owner_id, func.count(Vehicle.id)).group_by(Vehicle.owner_id).all()
    )
    document_counts = dict(
        db.query(Document.user_id, func.count(Document.id))
        .filter(Document.user_id.isnot(None))
        .group_by(Document.user_id)
        .all()
    )
    users = db.query(User).order_by(User.created_at.desc()).all()
    return [
        {
            "id": u.id,
            "username": u.username,
            "email": u.email,
            "role": u.role,
            "created_at": u.created_at,
            "vehicle_count": vehicle_counts.get(u.id, 0),
            "document_count": document_counts.get(u.id, 0),
        }
        for u in users
    ]


def get_user_detail(db: Session, user_id: int) -> User:
    user = (
        db.query(User)
        .options(
            selectinload(User.documents),
            selectinload(User.vehicles).selectinload(Vehicle.documents),
        )
        .filter(User.id == user_id)
        .first()
    )
    if not user:
        raise NotFoundError("User not found")
    return user


def delete_user_cascade(db: Session, user_id: int) -> dict:
    """Delete a user and everything they own atomically. Returns per-table counts."""
    if not db.query(User.id).filter(User.id == user_id).first():
        raise NotFoundError("User not found")

    vehicle_ids = select(Vehicle.id).where(Vehicle.owner_id == user_id)
    try:
        deleted = {
            "licenceDocuments": db.query(Document)
            .filter(Document.user_id == user_id)
            .delete(synchronize_session=False),
            "vehicleDocuments": db.query(Document)
            .filter(Document.vehicle_id.in_(vehicle_ids))
            .delete(synchronize_session=False),
            "vehicles": db.query(Vehicle)
            .filter(Vehicle.owner_id == user_id)
            .delete(synchronize_session=False),
            "users": db.query(User)
            .filter(User.id == user_id)
            .delete(synchronize_session=False),
        }
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[ADMIN] Cascading delete of user {user_id} failed: {e}", exc_info=True)
        raise StoreError("Failed to delete user") from e

    logger.warning(f"[ADMIN] Deleted user {user_id} | {deleted}")
    return deleted
