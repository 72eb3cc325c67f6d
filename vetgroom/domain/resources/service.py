"""Resource service - staff/room/service administration"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...cache import get_services_cached, invalidate_services_cache, set_services_cached
from ...models import Room, Service, Staff
from ...utils.sanitization import clean_text
from .repository import ResourceRepository
from .schemas import (
    RoomCreate,
    RoomUpdate,
    ServiceCreate,
    ServiceUpdate,
    StaffCreate,
    StaffUpdate,
)

logger = logging.getLogger(__name__)


def serialize_service(service: Service) -> dict:
    return {
        "id": service.id,
        "name": service.name,
        "type": service.type,
        "durationMinutes": service.duration_minutes,
        "price": service.price,
        "isActive": service.is_active,
    }


class ResourceService:
    """Service layer for rooms, staff and the service catalogue"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ResourceRepository()

    def _get_or_404(self, model, resource_id: int, tenant_id: int, label: str):
        resource = self.repo.get_resource(self.db, model, resource_id, tenant_id)
        if not resource:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return resource

    def _deactivate(self, model, resource_id: int, tenant_id: int, label: str) -> dict:
        resource = self._get_or_404(model, resource_id, tenant_id, label)
        self.repo.update_resource(self.db, resource, is_active=False)
        logger.info(f"🚫 Deactivated {label.lower()} {resource_id} in tenant {tenant_id}")
        return {"message": f"{label} deactivated"}

    # Rooms

    def list_rooms(self, tenant_id: int, include_inactive: bool = False) -> list[Room]:
        return self.repo.list_resources(self.db, Room, tenant_id, include_inactive)

    def create_room(self, tenant_id: int, data: RoomCreate) -> Room:
        return self.repo.create_resource(
            self.db,
            Room,
            tenant_id,
            name=clean_text(data.name, 255),
            type=data.type,
            capacity=data.capacity,
            equipment=data.equipment,
        )

    def update_room(self, tenant_id: int, room_id: int, data: RoomUpdate) -> Room:
        room = self._get_or_404(Room, room_id, tenant_id, "Room")
        return self.repo.update_resource(
            self.db,
            room,
            name=clean_text(data.name, 255),
            type=data.type,
            capacity=data.capacity,
            equipment=data.equipment,
            is_active=data.isActive,
        )

    def delete_room(self, tenant_id: int, room_id: int) -> dict:
        return self._deactivate(Room, room_id, tenant_id, "Room")

    # Staff

    def list_staff(self, tenant_id: int, include_inactive: bool = False) -> list[Staff]:
        return self.repo.list_resources(self.db, Staff, tenant_id, include_inactive)

    def create_staff(self, tenant_id: int, data: StaffCreate) -> Staff:
        return self.repo.create_resource(
            self.db,
            Staff,
            tenant_id,
            name=clean_text(data.name, 255),
            role=data.role,
            specialization=clean_text(data.specialization, 255),
            user_id=data.userId,
        )

    def update_staff(self, tenant_id: int, staff_id: int, data: StaffUpdate) -> Staff:
        member = self._get_or_404(Staff, staff_id, tenant_id, "Staff member")
        return self.repo.update_resource(
            self.db,
            member,
            name=clean_text(data.name, 255),
            role=data.role,
            specialization=clean_text(data.specialization, 255),
            is_active=data.isActive,
        )

    def delete_staff(self, tenant_id: int, staff_id: int) -> dict:
        return self._deactivate(Staff, staff_id, tenant_id, "Staff member")

    # Services

    def list_services(self, tenant_id: int, include_inactive: bool = False) -> list[dict]:
        """Serialized catalogue. The active list is cached per tenant."""
        if include_inactive:
            services = self.repo.list_resources(self.db, Service, tenant_id, include_inactive=True)
            return [serialize_service(s) for s in services]

        cached = get_services_cached(tenant_id)
        if cached is not None:
            return cached

        services = [
            serialize_service(s) for s in self.repo.list_resources(self.db, Service, tenant_id)
        ]
        set_services_cached(tenant_id, services)
        return services

    def get_service(self, tenant_id: int, service_id: int) -> Service:
        return self._get_or_404(Service, service_id, tenant_id, "Service")

    def create_service(self, tenant_id: int, data: ServiceCreate) -> Service:
        service = self.repo.create_resource(
            self.db,
            Service,
            tenant_id,
            name=clean_text(data.name, 255),
            type=data.type,
            duration_minutes=data.durationMinutes,
            price=data.price,
        )
        invalidate_services_cache(tenant_id)
        return service

    def update_service(self, tenant_id: int, service_id: int, data: ServiceUpdate) -> Service:
        service = self.get_service(tenant_id, service_id)
        service = self.repo.update_resource(
            self.db,
            service,
            name=clean_text(data.name, 255),
            type=data.type,
            duration_minutes=data.durationMinutes,
            price=data.price,
            is_active=data.isActive,
        )
        invalidate_services_cache(tenant_id)
        return service

    def delete_service(self, tenant_id: int, service_id: int) -> dict:
        result = self._deactivate(Service, service_id, tenant_id, "Service")
        invalidate_services_cache(tenant_id)
        return result
