# app/routers/vehicles.py
"""Citizen vehicles: register a vehicle and list own vehicles with their documents."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User, UserRole
from app.models.vehicle import Vehicle
from app.schemas.vehicle import VehicleCreate, VehicleListResponse, VehicleOut, VehicleResponse
from app.security import require_role
from app.services.vehicle_service import list_owned_vehicles, qr_payload, register_vehicle

router = APIRouter()
citizen_only = require_role(UserRole.CITIZEN)


def _vehicle_out(vehicle: Vehicle) -> VehicleOut:
    out = VehicleOut.model_validate(vehicle)
    out.qr_payload = qr_payload(vehicle)
    return out


@router.get("/vehicles", response_model=VehicleListResponse, summary="List own vehicles")
def list_vehicles(user: User = Depends(citizen_only), db: Session = Depends(get_db)):
    """Own vehicles with documents. Vehicles registered before tokens existed get one now."""
    vehicles = list_owned_vehicles(db, user)
    return VehicleListResponse(vehicles=[_vehicle_out(v) for v in vehicles])


@router.post("/vehicles", response_model=VehicleResponse, summary="Register a vehicle")
def create_vehicle(body: VehicleCreate, user: User = Depends(citizen_only), db: Session = Depends(get_db)):
    vehicle = register_vehicle(db, user, body.reg_number, body.model, body.vehicle_type)
    return VehicleResponse(vehicle=_vehicle_out(vehicle))
