# app/routers/verify.py
"""
POST /verify: two modes on one endpoint:
  {token}         any signed-in role; returns the stored verification report
  {images, type}  citizens only; preview analysis, nothing is stored
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from app.database import get_db
from app.errors import UnauthorizedError, ValidationError
from app.models.user import User, UserRole
from app.schemas.document import VerificationReport, VerifyRequest
from app.security import get_current_user
from app.services.analysis_service import analyze
from app.services.classifier import get_classifier
from app.services.verification_service import verify_token

router = APIRouter()


@router.post("/verify", summary="Redeem a verification token, or preview an analysis")
def verify(
    body: VerifyRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if body.token:
        report = verify_token(db, body.token)
        data = VerificationReport.model_validate(report).model_dump(mode="json", by_alias=True)
        return {"success": True, "data": data}

    if user.role != UserRole.CITIZEN.value:
        raise UnauthorizedError()
    if not body.images or not body.doc_type:
        raise ValidationError("Missing required fields")

    # Preview mode only
    classifier = get_classifier(request)
    analysis = analyze(classifier, body.images, body.doc_type)
    return {"success": True, "analysis": analysis}
