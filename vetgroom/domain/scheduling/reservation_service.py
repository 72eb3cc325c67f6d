"""Reservation service - short-lived slot holds while a client fills the intake form"""

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import DEFAULT_RESERVATION_TIMEOUT_MINUTES
from ...models import Service, SlotReservation, Tenant
from ...shared.timeutils import utcnow
from ...shared.validators import validate_date_string
from .availability_service import AvailabilityService
from .repository import SchedulingRepository
from .schemas import SlotReservationCreate
from .time_calculator import count_overlaps, to_minutes

logger = logging.getLogger(__name__)


class ReservationService:
    """Create, release and expire slot holds for one tenant"""

    def __init__(self, db: Session, tenant: Tenant):
        self.db = db
        self.tenant = tenant
        self.repo = SchedulingRepository()
        self.availability = AvailabilityService(db, tenant)

    @property
    def timeout_minutes(self) -> int:
        return self.tenant.reservation_timeout_minutes or DEFAULT_RESERVATION_TIMEOUT_MINUTES

    def serialize(self, reservation: SlotReservation) -> dict:
        remaining = int((reservation.expires_at - utcnow()).total_seconds())
        return {
            "reservationId": reservation.id,
            "date": reservation.scheduled_date.isoformat(),
            "time": reservation.scheduled_time,
            "durationMinutes": reservation.duration_minutes,
            "serviceId": reservation.service_id,
            "expiresAt": reservation.expires_at,
            "timeoutMinutes": self.timeout_minutes,
            "expiresIn": max(0, remaining),
        }

    def create(self, session_id: str, data: SlotReservationCreate) -> SlotReservation:
        day = validate_date_string(data.date)
        service = None
        if data.serviceId is not None:
            service = (
                self.db.query(Service)
                .filter(Service.id == data.serviceId, Service.tenant_id == self.tenant.id)
                .first()
            )
            if not service:
                raise HTTPException(status_code=404, detail="Service not found")

        duration, _ = self.availability.resolve_timing(
            data.appointmentType, data.durationMinutes, service
        )

        check = self.availability.check_availability(
            day, data.time, duration, session_id=session_id, with_alternatives=False
        )
        if check.reason in ("closed", "outside_hours", "past"):
            raise HTTPException(status_code=400, detail=check.message)

        start = to_minutes(data.time)
        end = start + duration

        # Appointments first so the caller can tell a booked slot from a held one
        appointments = [
            (to_minutes(a.scheduled_time), to_minutes(a.scheduled_time) + a.duration_minutes)
            for a in self.repo.get_active_appointments_on(self.db, self.tenant.id, day)
        ]
        booked = count_overlaps(start, end, appointments)
        if booked >= self.availability.capacity:
            raise HTTPException(status_code=409, detail="Slot is already booked")

        now = utcnow()
        active_holds = self.repo.get_active_reservations(self.db, self.tenant.id, day, now)
        held_by_others = [
            (to_minutes(h.scheduled_time), to_minutes(h.scheduled_time) + h.duration_minutes)
            for h in active_holds
            if h.session_id != session_id
        ]
        if booked + count_overlaps(start, end, held_by_others) >= self.availability.capacity:
            raise HTTPException(status_code=409, detail="Slot is already reserved")

        # A session holds one slot at a time
        for hold in self.repo.get_session_reservations(self.db, self.tenant.id, session_id):
            self.db.delete(hold)

        reservation = self.repo.create_reservation(
            self.db,
            tenant_id=self.tenant.id,
            session_id=session_id,
            scheduled_date=day,
            scheduled_time=data.time,
            duration_minutes=duration,
            service_id=service.id if service else None,
            expires_at=now + timedelta(minutes=self.timeout_minutes),
        )
        logger.info(
            f"⏳ Slot {day.isoformat()} {data.time} held for {self.timeout_minutes}m "
            f"(tenant {self.tenant.id}, reservation {reservation.id})"
        )
        return reservation

    def release(self, reservation_id: int, session_id: str) -> dict:
        reservation = self.repo.get_reservation(self.db, reservation_id, self.tenant.id)
        if not reservation:
            raise HTTPException(status_code=404, detail="Reservation not found")
        if reservation.session_id != session_id:
            raise HTTPException(status_code=403, detail="Reservation belongs to another session")
        self.repo.delete_reservation(self.db, reservation)
        logger.info(f"🔓 Released reservation {reservation_id} for tenant {self.tenant.id}")
        return {"message": "Reservation released"}

    def release_session_slot(self, session_id: str, day: date, hhmm: str) -> None:
        """Drop the caller's hold on a slot once it has been booked"""
        for hold in self.repo.get_session_reservations(self.db, self.tenant.id, session_id):
            if hold.scheduled_date == day and hold.scheduled_time == hhmm:
                self.db.delete(hold)
        self.db.commit()

    def list_active(self, day: Optional[date] = None) -> list[SlotReservation]:
        self.availability.cleanup_expired()
        return self.repo.get_active_reservations(self.db, self.tenant.id, day, utcnow())

    def cleanup(self) -> dict:
        deleted = self.availability.cleanup_expired()
        return {"deleted": deleted}
