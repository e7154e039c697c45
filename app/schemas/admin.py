# app/schemas/admin.py
from typing import Optional, Union
from app.schemas.auth import UserOut
from app.schemas.common import ApiModel
from app.schemas.document import DocumentOut
from app.schemas.vehicle import VehicleOut


class UserSummaryOut(UserOut):
    vehicle_count: int
    document_count: int


class UserDetailOut(UserOut):
    documents: list[DocumentOut]
    vehicles: list[VehicleOut]


class UserListResponse(ApiModel):
    success: bool = True
    users: Optional[list[UserSummaryOut]] = None
    user: Optional[UserDetailOut] = None


class UserDeleteRequest(ApiModel):
    id: int


class UserDeleteResponse(ApiModel):
    success: bool = True
    deleted: dict[str, Union[int, str]]
