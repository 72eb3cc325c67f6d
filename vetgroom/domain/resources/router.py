"""Resource router - rooms, staff and services administration"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import TenantAccess, get_tenant_access, require_tenant_admin
from ...database import get_db
from ...models import Room, Staff
from .schemas import (
    RoomCreate,
    RoomResponse,
    RoomUpdate,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
    StaffCreate,
    StaffResponse,
    StaffUpdate,
)
from .service import ResourceService, serialize_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants/{tenant_id}", tags=["Resources"])


def get_resource_service(db: Session = Depends(get_db)) -> ResourceService:
    """Dependency injection for ResourceService"""
    return ResourceService(db)


def _room_response(room: Room) -> RoomResponse:
    return RoomResponse(
        id=room.id,
        name=room.name,
        type=room.type,
        capacity=room.capacity,
        isActive=room.is_active,
        equipment=room.equipment,
    )


def _staff_response(member: Staff) -> StaffResponse:
    return StaffResponse(
        id=member.id,
        name=member.name,
        role=member.role,
        specialization=member.specialization,
        isActive=member.is_active,
        userId=member.user_id,
    )


# ============================================================================
# ROOMS
# ============================================================================


@router.get("/rooms", response_model=list[RoomResponse])
async def list_rooms(
    include_inactive: bool = Query(False),
    access: TenantAccess = Depends(get_tenant_access),
    service: ResourceService = Depends(get_resource_service),
):
    return [_room_response(r) for r in service.list_rooms(access.tenant_id, include_inactive)]


@router.post("/rooms", response_model=RoomResponse, status_code=201)
async def create_room(
    data: RoomCreate,
    access: TenantAccess = Depends(require_tenant_admin),
    service: ResourceService = Depends(get_resource_service),
):
    return _room_response(service.create_room(access.tenant_id, data))


@router.patch("/rooms/{room_id}", response_model=RoomResponse)
async def update_room(
    room_id: int,
    data: RoomUpdate,
    access: TenantAccess = Depends(require_tenant_admin),
    service: ResourceService = Depends(get_resource_service),
):
    return _room_response(service.update_room(access.tenant_id, room_id, data))


@router.delete("/rooms/{room_id}")
async def delete_room(
    room_id: int,
    access: TenantAccess = Depends(require_tenant_admin),
    service: ResourceService = Depends(get_resource_service),
):
    return service.delete_room(access.tenant_id, room_id)


# ============================================================================
# STAFF
# ============================================================================


@router.get("/staff", response_model=list[StaffResponse])
async def list_staff(
    include_inactive: bool = Query(False),
    access: TenantAccess = Depends(get_tenant_access),
    service: ResourceService = Depends(get_resource_service),
):
    return [_staff_response(s) for s in service.list_staff(access.tenant_id, include_inactive)]


@router.post("/staff", response_model=StaffResponse, status_code=201)
async def create_staff(
    data: StaffCreate,
    access: TenantAccess = Depends(require_tenant_admin),
    service: ResourceService = Depends(get_resource_service),
):
    return _staff_response(service.create_staff(access.tenant_id, data))


@router.patch("/staff/{staff_id}", response_model=StaffResponse)
async def update_staff(
    staff_id: int,
    data: StaffUpdate,
    access: TenantAccess = Depends(require_tenant_admin),
    service: ResourceService = Depends(get_resource_service),
):
    return _staff_response(service.update_staff(access.tenant_id, staff_id, data))


@router.delete("/staff/{staff_id}")
async def delete_staff(
    staff_id: int,
    access: TenantAccess = Depends(require_tenant_admin),
    service: ResourceService = Depends(get_resource_service),
):
    return service.delete_staff(access.tenant_id, staff_id)


# ============================================================================
# SERVICES
# ============================================================================


@router.get("/services", response_model=list[ServiceResponse])
async def list_services(
    include_inactive: bool = Query(False),
    access: TenantAccess = Depends(get_tenant_access),
    service: ResourceService = Depends(get_resource_service),
):
    return service.list_services(access.tenant_id, include_inactive)


@router.post("/services", response_model=ServiceResponse, status_code=201)
async def create_service(
    data: ServiceCreate,
    access: TenantAccess = Depends(require_tenant_admin),
    service: ResourceService = Depends(get_resource_service),
):
    return serialize_service(service.create_service(access.tenant_id, data))


@router.patch("/services/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    access: TenantAccess = Depends(require_tenant_admin),
    service: ResourceService = Depends(get_resource_service),
):
    return serialize_service(service.update_service(access.tenant_id, service_id, data))


@router.delete("/services/{service_id}")
async def delete_service(
    service_id: int,
    access: TenantAccess = Depends(require_tenant_admin),
    service: ResourceService = Depends(get_resource_service),
):
    return service.delete_service(access.tenant_id, service_id)
