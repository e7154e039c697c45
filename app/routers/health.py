# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + classifier configuration.
The classifier is not called here; check_classifier.py does a live round-trip.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from app.database import get_db
from app.config import settings
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Whether the document classifier was initialised at startup
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "classifier": "unknown",
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except SQLAlchemyError as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    if getattr(request.app.state, "classifier", None) is not None:
        result["classifier"] = f"ok ({settings.CLASSIFIER_MODEL})"
    else:
        result["classifier"] = "not configured"
        result["status"] = "degraded"

    return result
