# app/models/vehicle.py
"""
Citizen-registered vehicles.
Each vehicle carries its own verification token (vehicle namespace), printed
on the vehicle card as a QR payload. Legacy rows may have a NULL token until
the owner's vehicle list backfills it.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    reg_number = Column(String(50), nullable=False, index=True)
    model = Column(String(200), nullable=False)
    vehicle_type = Column("type", String(50), nullable=False)  # Car | Bike | Truck ...
    token = Column(String(36), unique=True, nullable=True, index=True)
    created_at = Column(DateTime, nullable=False)

    owner = relationship("User", back_populates="vehicles")
    documents = relationship("Document", back_populates="vehicle", order_by="Document.created_at")

    def __repr__(self):
        return f"<Vehicle {self.reg_number} model={self.model} owner={self.owner_id}>"
