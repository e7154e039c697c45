# app/schemas/vehicle.py
from pydantic import Field
from datetime import datetime
from typing import Optional
from app.schemas.common import ApiModel
from app.schemas.document import DocumentOut


class VehicleCreate(ApiModel):
    reg_number: str = Field(min_length=1, max_length=50)
    model: str = Field(min_length=1, max_length=200)
    vehicle_type: str = Field(alias="type", min_length=1, max_length=50)   # Car | Bike | Truck ...


class VehicleOut(ApiModel):
    id: int
    owner_id: int
    reg_number: str
    model: str
    vehicle_type: str = Field(alias="type")
    token: Optional[str]
    created_at: datetime
    documents: list[DocumentOut] = []
    qr_payload: Optional[str] = None    # {"type": "VEHICLE", "token": ...} for the vehicle card


class VehicleResponse(ApiModel):
    success: bool = True
    vehicle: VehicleOut


class VehicleListResponse(ApiModel):
    success: bool = True
    vehicles: list[VehicleOut]
