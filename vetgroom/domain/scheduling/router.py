"""Scheduling router - clinic hours, availability, slot holds and booking negotiation"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...auth import TenantAccess, get_tenant_access, require_tenant_admin
from ...database import get_db
from ...models import Service
from ...rate_limiter import create_rate_limiter
from ...shared.validators import validate_date_string, validate_time_string
from .availability_service import AvailabilityService
from .booking_service import BookingService
from .reservation_service import ReservationService
from .schemas import (
    AppointmentTypeConfigItem,
    AvailabilityResponse,
    AvailableSlotsResponse,
    BookingRequest,
    BusinessHoursDay,
    BusinessHoursUpdate,
    SlotReservationCreate,
    SlotReservationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants/{tenant_id}", tags=["Scheduling"])

rate_limit_availability = create_rate_limiter(limit=120, window_seconds=60, key_prefix="availability")
rate_limit_reservations = create_rate_limiter(limit=30, window_seconds=60, key_prefix="slot_holds")
rate_limit_bookings = create_rate_limiter(limit=20, window_seconds=60, key_prefix="bookings")


def _parse_date(value: str) -> date:
    try:
        return validate_date_string(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _parse_time(value: str) -> str:
    try:
        return validate_time_string(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _get_service(db: Session, tenant_id: int, service_id: Optional[int]) -> Optional[Service]:
    if service_id is None:
        return None
    service = db.query(Service).filter(Service.id == service_id, Service.tenant_id == tenant_id).first()
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


def require_session_id(x_session_id: Optional[str] = Header(None)) -> str:
    """Booking sessions identify themselves with the X-Session-Id header"""
    if not x_session_id or not x_session_id.strip():
        raise HTTPException(status_code=400, detail="X-Session-Id header is required")
    return x_session_id.strip()[:255]


# ============================================================================
# CONFIGURATION
# ============================================================================


@router.get("/business-hours", response_model=list[BusinessHoursDay])
async def get_business_hours(
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return AvailabilityService(db, access.tenant).get_business_hours()


@router.put("/business-hours", response_model=list[BusinessHoursDay])
async def update_business_hours(
    data: BusinessHoursUpdate,
    access: TenantAccess = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
):
    return AvailabilityService(db, access.tenant).update_business_hours(data.days)


@router.get("/appointment-types")
async def get_appointment_types(
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return AvailabilityService(db, access.tenant).get_type_configs()


@router.put("/appointment-types")
async def update_appointment_types(
    items: list[AppointmentTypeConfigItem],
    access: TenantAccess = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
):
    return AvailabilityService(db, access.tenant).update_type_configs(items)


# ============================================================================
# AVAILABILITY
# ============================================================================


@router.get("/availability", response_model=AvailabilityResponse)
async def check_availability(
    date: str = Query(..., description="YYYY-MM-DD, clinic local"),
    time: str = Query(..., description="HH:MM, clinic local"),
    service_id: Optional[int] = Query(None),
    duration: Optional[int] = Query(None, ge=5, le=480),
    type: Optional[str] = Query(None),
    x_session_id: Optional[str] = Header(None),
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_availability),
):
    day = _parse_date(date)
    hhmm = _parse_time(time)
    service = _get_service(db, access.tenant_id, service_id)

    availability = AvailabilityService(db, access.tenant)
    resolved_duration, interval = availability.resolve_timing(type, duration, service)
    result = availability.check_availability(
        day, hhmm, resolved_duration, interval, session_id=x_session_id
    )
    return AvailabilityResponse(
        available=result.available,
        reason=result.reason,
        message=result.message,
        date=day.isoformat(),
        time=result.time,
        durationMinutes=result.duration,
        alternativeSlots=result.alternatives,
    )


@router.get("/available-slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    date: str = Query(...),
    service_id: Optional[int] = Query(None),
    type: Optional[str] = Query(None),
    duration: Optional[int] = Query(None, ge=5, le=480),
    x_session_id: Optional[str] = Header(None),
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_availability),
):
    day = _parse_date(date)
    service = _get_service(db, access.tenant_id, service_id)

    availability = AvailabilityService(db, access.tenant)
    resolved_duration, interval = availability.resolve_timing(type, duration, service)
    return availability.day_slots(day, resolved_duration, interval, session_id=x_session_id)


# ============================================================================
# SLOT RESERVATIONS
# ============================================================================


@router.post("/slot-reservations", response_model=SlotReservationResponse, status_code=201)
async def create_slot_reservation(
    data: SlotReservationCreate,
    session_id: str = Depends(require_session_id),
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_reservations),
):
    service = ReservationService(db, access.tenant)
    return service.serialize(service.create(session_id, data))


@router.get("/slot-reservations", response_model=list[SlotReservationResponse])
async def list_slot_reservations(
    date: Optional[str] = Query(None),
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    day = _parse_date(date) if date else None
    service = ReservationService(db, access.tenant)
    return [service.serialize(r) for r in service.list_active(day)]


# Declared before the {reservation_id} route so "cleanup" is not parsed as an id
@router.post("/slot-reservations/cleanup")
async def cleanup_slot_reservations(
    access: TenantAccess = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
):
    return ReservationService(db, access.tenant).cleanup()


@router.delete("/slot-reservations/{reservation_id}")
async def release_slot_reservation(
    reservation_id: int,
    session_id: str = Depends(require_session_id),
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return ReservationService(db, access.tenant).release(reservation_id, session_id)


# ============================================================================
# BOOKING NEGOTIATION
# ============================================================================


@router.post("/bookings")
async def create_booking(
    data: BookingRequest,
    x_session_id: Optional[str] = Header(None),
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_bookings),
):
    """
    Validate the intake form and book it if the slot is free.

    - 400: {error: {message, fieldErrors}}
    - 202: {userFriendlyMessage, appOptions: [{date, time}]}
    - 200: {appointment, userFriendlyMessage}
    """
    status_code, body = BookingService(db, access.tenant).negotiate(data, x_session_id)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))
