# app/routers/documents.py
"""Citizen licence documents: the analysed documents attached to the user rather than a vehicle."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.document import DocumentListResponse, DocumentOut
from app.security import require_role
from app.services.document_service import list_licence_documents

router = APIRouter()


@router.get("/user/documents", response_model=DocumentListResponse, summary="List own licence documents")
def list_user_documents(user: User = Depends(require_role(UserRole.CITIZEN)), db: Session = Depends(get_db)):
    documents = list_licence_documents(db, user)
    return DocumentListResponse(documents=[DocumentOut.model_validate(d) for d in documents])
