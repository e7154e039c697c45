# app/services/vehicle_service.py
"""
Vehicle registration, lookup and lazy token backfill.
Used by the vehicles, analyze and admin routers.
"""

import json
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from app.errors import NotFoundError, TokenCollisionError
from app.models.user import User
from app.models.vehicle import Vehicle
from app.services.token_service import claim_token, commit_token_record
from app.utils.logger import get_logger

logger = get_logger(__name__)


def register_vehicle(db: Session, owner: User, reg_number: str, model: str, vehicle_type: str) -> Vehicle:
    """Create a vehicle for the owner. The token is assigned immediately."""
    vehicle = Vehicle(
        owner_id=owner.id,
        reg_number=reg_number.strip(),
        model=model.strip(),
        vehicle_type=vehicle_type.strip(),
        token=claim_token(db),
        created_at=datetime.utcnow(),
    )
    db.add(vehicle)
    commit_token_record(db, vehicle, "register vehicle")
    logger.info(f"[VEHICLE] Registered {vehicle.reg_number} for user={owner.id} token={vehicle.token}")
    return vehicle


def ensure_vehicle_token(db: Session, vehicle: Vehicle) -> str:
    """
    Backfill a token on a legacy vehicle. Idempotent: a vehicle that already
    has a token is returned untouched and nothing is written.
    """
    if vehicle.token:
        return vehicle.token

    # Conditional write: a concurrent backfill that got there first wins
    token = claim_token(db)
    try:
        claimed = (
            db.query(Vehicle)
            .filter(Vehicle.id == vehicle.id, Vehicle.token.is_(None))
            .update({Vehicle.token: token}, synchronize_session=False)
        )
    except IntegrityError as e:
        db.rollback()
        logger.error(f"[TOKEN] Unique token violation while backfilling vehicle {vehicle.id}: {e.orig}")
        raise TokenCollisionError("Token collision while trying to backfill vehicle token") from e
    commit_token_record(db, vehicle, "backfill vehicle token")

    if claimed:
        logger.info(f"[VEHICLE] Backfilled token for vehicle {vehicle.id}")
    else:
        logger.info(f"[VEHICLE] Vehicle {vehicle.id} already backfilled by another request")
    return vehicle.token


def list_owned_vehicles(db: Session, owner: User) -> list[Vehicle]:
    """Owner's vehicles with their documents, tokens backfilled where missing."""
    vehicles = (
        db.query(Vehicle)
        .options(selectinload(Vehicle.documents))
        .filter(Vehicle.owner_id == owner.id)
        .order_by(Vehicle.created_at)
        .all()
    )
    for vehicle in vehicles:
        ensure_vehicle_token(db, vehicle)
    return vehicles


def get_owned_vehicle(db: Session, owner: User, vehicle_id: int) -> Vehicle:
    """Vehicle by id, only if it belongs to owner. Other owners' vehicles look absent."""
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id, Vehicle.owner_id == owner.id).first()
    if not vehicle:
        raise NotFoundError("Vehicle not found")
    return vehicle


def lookup_vehicle_by_token(db: Session, token: str):
    """Find a vehicle by its verification token. Returns None if not found."""
    return (
        db.query(Vehicle)
        .options(selectinload(Vehicle.owner))
        .filter(Vehicle.token == token)
        .first()
    )


def qr_payload(vehicle: Vehicle) -> str:
    """Scannable vehicle-card payload."""
    return json.dumps({"type": "VEHICLE", "token": vehicle.token})
