# app/models/document.py
"""
Analysed documents: immutable audit records.
One row per successful classification. The token (document namespace) is set
at creation and never changes. image_url and analysis_result are JSON text
columns handled by app.utils.json_codec.
"""

import enum
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from app.database import Base

DRIVING_LICENSE = "Driving License"


class DocumentStatus(str, enum.Enum):
    VALID = "VALID"
    EXPIRED = "EXPIRED"
    MISSING = "MISSING"
    SUSPICIOUS = "SUSPICIOUS"


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (
        # Licence → user, everything else → vehicle; never both, never neither
        CheckConstraint(
            "(user_id IS NULL) <> (vehicle_id IS NULL)",
            name="ck_documents_single_owner",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    doc_type = Column("type", String(100), nullable=False)
    image_url = Column(Text, nullable=False)
    analysis_result = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, index=True)
    token = Column(String(36), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), index=True)
    created_at = Column(DateTime, nullable=False)

    user = relationship("User", back_populates="documents")
    vehicle = relationship("Vehicle", back_populates="documents")

    def __repr__(self):
        return f"<Document {self.id} type={self.doc_type} status={self.status}>"
