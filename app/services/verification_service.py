# app/services/verification_service.py
"""
Verification Workflow: police redeem a token for the stored verdict.

A token resolves to exactly one TokenTarget:
  DocumentTarget → the stored document verdict and analysis, verbatim
  VehicleTarget  → vehicle card token; asserts only that the vehicle exists,
                   so the report is always VALID with a stub analysis
  NoTarget       → NotFoundError("Invalid Token")
Callers tell the two success cases apart by analysis.detectedType.
"""

from dataclasses import dataclass
from typing import Any, Union
from sqlalchemy.orm import Session, selectinload
from app.errors import NotFoundError
from app.models.document import Document
from app.models.vehicle import Vehicle
from app.services.vehicle_service import lookup_vehicle_by_token
from app.utils.json_codec import decode_analysis
from app.utils.logger import get_logger

logger = get_logger(__name__)

NOT_AVAILABLE = "N/A"
UNKNOWN_OWNER = "Unknown"
VEHICLE_REGISTRATION = "Vehicle Registration"


@dataclass(frozen=True)
class DocumentTarget:
    document: Document


@dataclass(frozen=True)
class VehicleTarget:
    vehicle: Vehicle


@dataclass(frozen=True)
class NoTarget:
    token: str


TokenTarget = Union[DocumentTarget, VehicleTarget, NoTarget]


def resolve_token(db: Session, token: str) -> TokenTarget:
    """Single lookup across both token namespaces. Documents are checked first."""
    token = (token or "").strip()
    if not token:
        return NoTarget(token)

    document = (
        db.query(Document)
        .options(
            selectinload(Document.user),
            selectinload(Document.vehicle).selectinload(Vehicle.owner),
        )
        .filter(Document.token == token)
        .first()
    )
    if document:
        return DocumentTarget(document)

    vehicle = lookup_vehicle_by_token(db, token)
    if vehicle:
        return VehicleTarget(vehicle)

    return NoTarget(token)


def build_report(target: TokenTarget) -> dict[str, Any]:
    """Normalised verification report for a resolved token."""
    if isinstance(target, DocumentTarget):
        return _document_report(target.document)
    if isinstance(target, VehicleTarget):
        return _vehicle_report(target.vehicle)
    raise NotFoundError("Invalid Token")


def verify_token(db: Session, token: str) -> dict[str, Any]:
    target = resolve_token(db, token)
    if isinstance(target, NoTarget):
        logger.warning(f"[VERIFY] Unknown token {target.token!r}")
    else:
        logger.info(f"[VERIFY] Token {token} matched {type(target).__name__}")
    return build_report(target)


def _document_report(document: Document) -> dict[str, Any]:
    analysis = decode_analysis(document.analysis_result)
    vehicle = document.vehicle

    owner = UNKNOWN_OWNER
    if vehicle is not None and vehicle.owner is not None:
        owner = vehicle.owner.username
    elif document.user is not None:
        owner = document.user.username
    elif analysis.get("ownerName"):
        owner = str(analysis["ownerName"])

    reg_number = (vehicle.reg_number if vehicle is not None else None) or analysis.get("regNumber") or NOT_AVAILABLE

    return {
        "status": document.status,
        "timestamp": document.created_at,
        "vehicle": {
            "owner": owner,
            "model": vehicle.model if vehicle is not None else NOT_AVAILABLE,
            "reg_number": str(reg_number),
        },
        "image_url": document.image_url,
        "analysis": analysis,
    }


def _vehicle_report(vehicle: Vehicle) -> dict[str, Any]:
    return {
        "status": "VALID",
        "timestamp": vehicle.created_at,
        "vehicle": {
            "owner": vehicle.owner.username if vehicle.owner is not None else UNKNOWN_OWNER,
            "model": vehicle.model,
            "reg_number": vehicle.reg_number,
        },
        "image_url": None,
        "analysis": {
            "detectedType": VEHICLE_REGISTRATION,
            "expiryDate": NOT_AVAILABLE,
            "issues": [],
        },
    }
