# app/services/document_service.py
"""
Token issuance for analysed documents.

A document row is only created after a successful classification. Routing:
  "Driving License" → attached to the authenticated user
  anything else     → attached to one of the user's own vehicles (vehicleId required)
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from sqlalchemy.orm import Session
from app.errors import ValidationError
from app.models.document import DRIVING_LICENSE, Document
from app.models.user import User
from app.services.token_service import claim_token, commit_token_record
from app.services.vehicle_service import get_owned_vehicle
from app.utils.json_codec import encode_analysis, encode_images
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Attachment:
    user_id: Optional[int] = None
    vehicle_id: Optional[int] = None


def resolve_attachment(db: Session, owner: User, doc_type: str, vehicle_id: Optional[int]) -> Attachment:
    """Decide where a document of doc_type hangs. Raises before any classifier call is spent."""
    if doc_type == DRIVING_LICENSE:
        return Attachment(user_id=owner.id)
    if vehicle_id is None:
        raise ValidationError("Vehicle ID required for this document type")
    vehicle = get_owned_vehicle(db, owner, vehicle_id)
    return Attachment(vehicle_id=vehicle.id)


def issue_document(
    db: Session,
    owner: User,
    doc_type: str,
    images: list[str],
    analysis: dict[str, Any],
    vehicle_id: Optional[int] = None,
) -> Document:
    """Persist the analysed document with a fresh token and the classifier's status."""
    target = resolve_attachment(db, owner, doc_type, vehicle_id)
    document = Document(
        doc_type=doc_type,
        image_url=encode_images(images),
        analysis_result=encode_analysis(analysis),
        status=str(analysis["status"]),
        token=claim_token(db),
        user_id=target.user_id,
        vehicle_id=target.vehicle_id,
        created_at=datetime.utcnow(),
    )
    db.add(document)
    commit_token_record(db, document, "store analysed document")
    logger.info(
        f"[DOCUMENT] Issued {document.token} | type={doc_type} status={document.status} "
        f"user={target.user_id} vehicle={target.vehicle_id}"
    )
    return document


def list_licence_documents(db: Session, owner: User) -> list[Document]:
    """Documents attached directly to the user (driving licences)."""
    return (
        db.query(Document)
        .filter(Document.user_id == owner.id)
        .order_by(Document.created_at.desc())
        .all()
    )
