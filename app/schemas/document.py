# app/schemas/document.py
from pydantic import Field
from datetime import datetime
from typing import Any, Optional
from app.schemas.common import ApiModel


class DocumentOut(ApiModel):
    id: int
    doc_type: str = Field(alias="type")
    image_url: str                 # JSON array of data URLs, as stored
    analysis_result: str           # classifier JSON, as stored
    status: str
    token: str
    user_id: Optional[int]
    vehicle_id: Optional[int]
    created_at: datetime


class DocumentListResponse(ApiModel):
    success: bool = True
    documents: list[DocumentOut]


class AnalyzeRequest(ApiModel):
    images: list[str] = Field(min_length=1)
    doc_type: str = Field(alias="type", min_length=1)
    vehicle_id: Optional[int] = None


class AnalyzeResponse(ApiModel):
    success: bool = True
    analysis: dict[str, Any]
    token: str
    document_id: int


class VerifyRequest(ApiModel):
    """Either {token} for a lookup, or {images, type} for a preview analysis."""
    token: Optional[str] = None
    images: Optional[list[str]] = None
    doc_type: Optional[str] = Field(default=None, alias="type")


class ReportVehicle(ApiModel):
    owner: str
    model: str
    reg_number: str


class VerificationReport(ApiModel):
    status: str
    timestamp: datetime
    vehicle: ReportVehicle
    image_url: Optional[str] = None
    analysis: dict[str, Any]

