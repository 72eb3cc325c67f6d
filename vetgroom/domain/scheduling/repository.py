"""Scheduling repository - business hours, type configs, appointments and slot holds"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import (
    Appointment,
    AppointmentTypeConfig,
    BusinessHours,
    SlotReservation,
)


class SchedulingRepository:
    """Repository for scheduling database operations"""

    # Business hours

    @staticmethod
    def get_business_hours(db: Session, tenant_id: int) -> list[BusinessHours]:
        return (
            db.query(BusinessHours)
            .filter(BusinessHours.tenant_id == tenant_id)
            .order_by(BusinessHours.day_of_week)
            .all()
        )

    @staticmethod
    def replace_business_hours(db: Session, tenant_id: int, days: list[dict]) -> list[BusinessHours]:
        db.query(BusinessHours).filter(BusinessHours.tenant_id == tenant_id).delete(
            synchronize_session=False
        )
        rows = [BusinessHours(tenant_id=tenant_id, **day) for day in days]
        db.add_all(rows)
        db.commit()
        return SchedulingRepository.get_business_hours(db, tenant_id)

    # Appointment type configs

    @staticmethod
    def get_type_configs(db: Session, tenant_id: int) -> list[AppointmentTypeConfig]:
        return (
            db.query(AppointmentTypeConfig)
            .filter(AppointmentTypeConfig.tenant_id == tenant_id)
            .order_by(AppointmentTypeConfig.appointment_type)
            .all()
        )

    @staticmethod
    def upsert_type_config(
        db: Session, tenant_id: int, appointment_type: str, duration: int, interval: int
    ) -> AppointmentTypeConfig:
        config = (
            db.query(AppointmentTypeConfig)
            .filter(
                AppointmentTypeConfig.tenant_id == tenant_id,
                AppointmentTypeConfig.appointment_type == appointment_type,
            )
            .first()
        )
        if not config:
            config = AppointmentTypeConfig(tenant_id=tenant_id, appointment_type=appointment_type)
            db.add(config)
        config.default_duration_minutes = duration
        config.slot_interval_minutes = interval
        db.flush()
        return config

    # Appointments

    @staticmethod
    def get_active_appointments_on(
        db: Session, tenant_id: int, day: date, exclude_id: Optional[int] = None
    ) -> list[Appointment]:
        """Appointments that occupy time on the given day (everything except cancelled)"""
        query = db.query(Appointment).filter(
            Appointment.tenant_id == tenant_id,
            Appointment.scheduled_date == day,
            Appointment.status != "cancelled",
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.all()

    @staticmethod
    def get_appointments(
        db: Session,
        tenant_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
    ) -> list[Appointment]:
        query = (
            db.query(Appointment)
            .options(
                joinedload(Appointment.client),
                joinedload(Appointment.pet),
                joinedload(Appointment.service),
            )
            .filter(Appointment.tenant_id == tenant_id)
        )
        if start_date:
            query = query.filter(Appointment.scheduled_date >= start_date)
        if end_date:
            query = query.filter(Appointment.scheduled_date <= end_date)
        if status:
            query = query.filter(Appointment.status == status)
        return query.order_by(Appointment.scheduled_date, Appointment.scheduled_time).all()

    @staticmethod
    def get_appointment(db: Session, appointment_id: int, tenant_id: int) -> Optional[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.id == appointment_id, Appointment.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def add_appointment(db: Session, **data) -> Appointment:
        appointment = Appointment(**data)
        db.add(appointment)
        db.flush()
        return appointment

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()

    # Slot reservations

    @staticmethod
    def delete_expired_reservations(db: Session, now: datetime, tenant_id: Optional[int] = None) -> int:
        query = db.query(SlotReservation).filter(SlotReservation.expires_at <= now)
        if tenant_id is not None:
            query = query.filter(SlotReservation.tenant_id == tenant_id)
        deleted = query.delete(synchronize_session=False)
        db.commit()
        return deleted

    @staticmethod
    def get_active_reservations(
        db: Session, tenant_id: int, day: Optional[date], now: datetime
    ) -> list[SlotReservation]:
        query = db.query(SlotReservation).filter(
            SlotReservation.tenant_id == tenant_id,
            SlotReservation.expires_at > now,
        )
        if day is not None:
            query = query.filter(SlotReservation.scheduled_date == day)
        return query.order_by(SlotReservation.scheduled_date, SlotReservation.scheduled_time).all()

    @staticmethod
    def get_reservation(db: Session, reservation_id: int, tenant_id: int) -> Optional[SlotReservation]:
        return (
            db.query(SlotReservation)
            .filter(SlotReservation.id == reservation_id, SlotReservation.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def get_session_reservations(db: Session, tenant_id: int, session_id: str) -> list[SlotReservation]:
        return (
            db.query(SlotReservation)
            .filter(SlotReservation.tenant_id == tenant_id, SlotReservation.session_id == session_id)
            .all()
        )

    @staticmethod
    def create_reservation(db: Session, **data) -> SlotReservation:
        reservation = SlotReservation(**data)
        db.add(reservation)
        db.commit()
        db.refresh(reservation)
        return reservation

    @staticmethod
    def delete_reservation(db: Session, reservation: SlotReservation) -> None:
        db.delete(reservation)
        db.commit()
