# app/routers/analyze.py
"""
Citizen document upload: classify the images, then store the verdict under a
fresh verification token. Classification and storage are one unit; if storage
fails the caller resubmits.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.document import AnalyzeRequest, AnalyzeResponse
from app.security import require_role
from app.services.analysis_service import analyze
from app.services.classifier import Classifier, get_classifier
from app.services.document_service import issue_document, resolve_attachment

router = APIRouter()


@router.post("/analyze", response_model=AnalyzeResponse, summary="Analyse and store a document")
def analyze_document(
    body: AnalyzeRequest,
    user: User = Depends(require_role(UserRole.CITIZEN)),
    db: Session = Depends(get_db),
    classifier: Classifier = Depends(get_classifier),
):
    # Reject bad routing before spending a classifier call
    resolve_attachment(db, user, body.doc_type, body.vehicle_id)

    analysis = analyze(classifier, body.images, body.doc_type)
    document = issue_document(db, user, body.doc_type, body.images, analysis, body.vehicle_id)
    return AnalyzeResponse(analysis=analysis, token=document.token, document_id=document.id)
