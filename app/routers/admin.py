# app/routers/admin.py
"""Administrator user management: list, detail and cascading delete."""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.admin import (
    UserDeleteRequest,
    UserDeleteResponse,
    UserDetailOut,
    UserListResponse,
    UserSummaryOut,
)
from app.security import require_role
from app.services.admin_service import delete_user_cascade, get_user_detail, list_users_with_counts
from app.services.vehicle_service import qr_payload

router = APIRouter()
admin_only = require_role(UserRole.ADMIN)


@router.get(
    "/admin/users",
    response_model=UserListResponse,
    response_model_exclude_none=True,
    summary="List users, or one user's details with ?id=",
)
def get_users(
    user_id: Optional[int] = Query(None, alias="id"),
    admin: User = Depends(admin_only),
    db: Session = Depends(get_db),
):
    if user_id is not None:
        user = get_user_detail(db, user_id)
        detail = UserDetailOut.model_validate(user)
        for vehicle_out, vehicle in zip(detail.vehicles, user.vehicles):
            vehicle_out.qr_payload = qr_payload(vehicle) if vehicle.token else None
        return UserListResponse(user=detail)
    return UserListResponse(users=[UserSummaryOut.model_validate(u) for u in list_users_with_counts(db)])


@router.delete("/admin/users", response_model=UserDeleteResponse, summary="Delete a user and everything they own")
def delete_user(body: UserDeleteRequest, admin: User = Depends(admin_only), db: Session = Depends(get_db)):
    deleted = delete_user_cascade(db, body.id)
    return UserDeleteResponse(deleted=deleted)
