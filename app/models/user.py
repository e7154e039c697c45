# app/models/user.py
"""
Users table: citizens, police officers and administrators.
Licence documents hang directly off the user; everything else hangs off a vehicle.
"""

import enum
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from app.database import Base


class UserRole(str, enum.Enum):
    CITIZEN = "CITIZEN"
    POLICE = "POLICE"
    ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.CITIZEN.value)
    created_at = Column(DateTime, nullable=False)

    vehicles = relationship("Vehicle", back_populates="owner", order_by="Vehicle.created_at")
    documents = relationship("Document", back_populates="user", order_by="Document.created_at")

    def __repr__(self):
        return f"<User {self.id} {self.username} role={self.role}>"
