"""Appointment service - staff-side appointment management and rescheduling"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Appointment, Room, Service, Staff, Tenant
from ...utils.sanitization import clean_text
from ..clients.service import ClientService
from .availability_service import AvailabilityService
from .repository import SchedulingRepository
from .schemas import AppointmentCreate, AppointmentUpdate, RescheduleRequest

logger = logging.getLogger(__name__)


def serialize_appointment(appointment: Appointment) -> dict:
    return {
        "id": appointment.id,
        "clientId": appointment.client_id,
        "clientName": appointment.client.name if appointment.client else None,
        "petId": appointment.pet_id,
        "petName": appointment.pet.name if appointment.pet else None,
        "serviceId": appointment.service_id,
        "serviceName": appointment.service.name if appointment.service else None,
        "roomId": appointment.room_id,
        "staffId": appointment.staff_id,
        "type": appointment.type,
        "status": appointment.status,
        "scheduledDate": appointment.scheduled_date.isoformat(),
        "scheduledTime": appointment.scheduled_time,
        "durationMinutes": appointment.duration_minutes,
        "collectionType": appointment.collection_type,
        "notes": appointment.notes,
        "services": appointment.services,
        "totalCost": appointment.total_cost,
        "created_at": appointment.created_at,
    }


class AppointmentService:
    """Service layer for appointments of one tenant"""

    def __init__(self, db: Session, tenant: Tenant):
        self.db = db
        self.tenant = tenant
        self.repo = SchedulingRepository()
        self.availability = AvailabilityService(db, tenant)
        self.clients = ClientService(db)

    def list_appointments(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
    ) -> list[Appointment]:
        if start_date and end_date and start_date > end_date:
            raise HTTPException(status_code=400, detail="start_date must be before end_date")
        return self.repo.get_appointments(self.db, self.tenant.id, start_date, end_date, status)

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.repo.get_appointment(self.db, appointment_id, self.tenant.id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Cita no encontrada")
        return appointment

    def get_service(self, service_id: Optional[int]) -> Optional[Service]:
        if service_id is None:
            return None
        service = (
            self.db.query(Service)
            .filter(Service.id == service_id, Service.tenant_id == self.tenant.id)
            .first()
        )
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")
        return service

    def _check_assignment(self, room_id: Optional[int], staff_id: Optional[int]) -> None:
        if room_id is not None and not (
            self.db.query(Room).filter(Room.id == room_id, Room.tenant_id == self.tenant.id).first()
        ):
            raise HTTPException(status_code=404, detail="Room not found")
        if staff_id is not None and not (
            self.db.query(Staff).filter(Staff.id == staff_id, Staff.tenant_id == self.tenant.id).first()
        ):
            raise HTTPException(status_code=404, detail="Staff member not found")

    def create_appointment(self, data: AppointmentCreate) -> Appointment:
        """Staff override: books without checking availability"""
        service = self.get_service(data.serviceId)
        self._check_assignment(data.roomId, data.staffId)
        duration, _ = self.availability.resolve_timing(data.type, data.durationMinutes, service)

        client = self.clients.find_or_create_client(
            self.tenant.id, data.clientName, phone=data.clientPhone, email=data.clientEmail
        )
        pet = self.clients.find_or_create_pet(
            self.tenant.id, client, data.petName, species=data.petSpecies, breed=data.petBreed
        )

        appointment = self.repo.add_appointment(
            self.db,
            tenant_id=self.tenant.id,
            client_id=client.id,
            pet_id=pet.id,
            service_id=service.id if service else None,
            room_id=data.roomId,
            staff_id=data.staffId,
            type=data.type,
            status="scheduled",
            scheduled_date=data.scheduledDate,
            scheduled_time=data.scheduledTime,
            duration_minutes=duration,
            notes=clean_text(data.notes, 2000),
            services=data.services or ([service.name] if service else None),
            total_cost=data.totalCost if data.totalCost is not None else (service.price if service else None),
        )
        self.db.commit()
        self.db.refresh(appointment)
        logger.info(
            f"📅 Appointment {appointment.id} created for {data.scheduledDate.isoformat()} "
            f"{data.scheduledTime} (tenant {self.tenant.id})"
        )
        return appointment

    def update_appointment(self, appointment_id: int, data: AppointmentUpdate) -> Appointment:
        appointment = self.get_appointment(appointment_id)
        self._check_assignment(data.roomId, data.staffId)

        updates = {
            "status": data.status,
            "notes": clean_text(data.notes, 2000),
            "room_id": data.roomId,
            "staff_id": data.staffId,
            "duration_minutes": data.durationMinutes,
            "services": data.services,
            "total_cost": data.totalCost,
        }
        for key, value in updates.items():
            if value is not None:
                setattr(appointment, key, value)
        self.db.commit()
        self.db.refresh(appointment)
        if data.status:
            logger.info(f"🔄 Appointment {appointment.id} status -> {data.status}")
        return appointment

    def delete_appointment(self, appointment_id: int) -> dict:
        appointment = self.get_appointment(appointment_id)
        self.repo.delete_appointment(self.db, appointment)
        logger.info(f"🗑️ Appointment {appointment_id} deleted (tenant {self.tenant.id})")
        return {"message": "Cita eliminada"}

    def reschedule(self, appointment_id: int, data: RescheduleRequest) -> dict:
        """
        Move an appointment to a new slot. The appointment's own current slot
        is ignored when checking for conflicts.
        """
        appointment = self.get_appointment(appointment_id)
        if appointment.status in ("cancelled", "completed"):
            raise HTTPException(
                status_code=400, detail=f"No se puede reprogramar una cita {appointment.status}"
            )

        _, interval = self.availability.resolve_timing(appointment.type, appointment.duration_minutes)
        result = self.availability.check_availability(
            data.scheduledDate,
            data.scheduledTime,
            appointment.duration_minutes,
            interval,
            exclude_appointment_id=appointment.id,
        )
        if not result.available:
            raise HTTPException(
                status_code=409,
                detail={
                    "message": result.message,
                    "reason": result.reason,
                    "alternativeSlots": result.alternatives,
                },
            )

        old_date = f"{appointment.scheduled_date.isoformat()} {appointment.scheduled_time}"
        appointment.scheduled_date = data.scheduledDate
        appointment.scheduled_time = data.scheduledTime
        appointment.status = "rescheduled"
        appointment.notes = f"Reprogramada: {clean_text(data.reason, 500) or 'Sin motivo especificado'}"
        self.db.commit()
        self.db.refresh(appointment)

        new_date = f"{data.scheduledDate.isoformat()} {data.scheduledTime}"
        logger.info(f"🔁 Appointment {appointment.id} rescheduled {old_date} -> {new_date}")
        return {
            "appointment": serialize_appointment(appointment),
            "message": "Cita reprogramada exitosamente",
            "oldDate": old_date,
            "newDate": new_date,
        }
