"""Appointments router - staff-side appointment management"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import TenantAccess, get_tenant_access
from ...database import get_db
from .appointment_service import AppointmentService, serialize_appointment
from .schemas import AppointmentCreate, AppointmentResponse, AppointmentUpdate, RescheduleRequest

router = APIRouter(prefix="/tenants/{tenant_id}/appointments", tags=["Appointments"])


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    status: Optional[str] = Query(None),
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    service = AppointmentService(db, access.tenant)
    return [serialize_appointment(a) for a in service.list_appointments(start_date, end_date, status)]


@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return serialize_appointment(AppointmentService(db, access.tenant).create_appointment(data))


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return serialize_appointment(AppointmentService(db, access.tenant).get_appointment(appointment_id))


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    appointment = AppointmentService(db, access.tenant).update_appointment(appointment_id, data)
    return serialize_appointment(appointment)


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: int,
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return AppointmentService(db, access.tenant).delete_appointment(appointment_id)


@router.put("/{appointment_id}/reschedule")
async def reschedule_appointment(
    appointment_id: int,
    data: RescheduleRequest,
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return AppointmentService(db, access.tenant).reschedule(appointment_id, data)
