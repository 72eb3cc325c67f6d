"""Scheduling schemas - business hours, availability, holds, bookings and appointments"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...models import APPOINTMENT_STATUSES
from ...shared.validators import (
    validate_date_string,
    validate_email,
    validate_mx_phone,
    validate_time_string,
)
from .time_calculator import to_minutes

# ============================================================================
# CONFIGURATION
# ============================================================================


class BusinessHoursDay(BaseModel):
    dayOfWeek: int = Field(..., ge=0, le=6)  # 0=Monday
    openTime: str = "09:00"
    closeTime: str = "17:00"
    isClosed: bool = False

    @field_validator("openTime", "closeTime")
    @classmethod
    def check_time(cls, v):
        return validate_time_string(v)

    @model_validator(mode="after")
    def check_range(self):
        if not self.isClosed and to_minutes(self.openTime) >= to_minutes(self.closeTime):
            raise ValueError("openTime must be before closeTime")
        return self


class BusinessHoursUpdate(BaseModel):
    days: list[BusinessHoursDay]

    @field_validator("days")
    @classmethod
    def check_all_days(cls, v):
        if sorted(d.dayOfWeek for d in v) != list(range(7)):
            raise ValueError("Provide exactly one entry for each day of the week (0-6)")
        return v


class AppointmentTypeConfigItem(BaseModel):
    appointmentType: str = Field(..., min_length=1, max_length=50)
    defaultDurationMinutes: int = Field(..., ge=5, le=480)
    slotIntervalMinutes: int = Field(..., ge=5, le=240)

    @field_validator("appointmentType")
    @classmethod
    def normalize_type(cls, v):
        return v.strip().lower()


# ============================================================================
# AVAILABILITY & HOLDS
# ============================================================================


class SlotOption(BaseModel):
    date: str
    time: str


class AvailabilityResponse(BaseModel):
    available: bool
    reason: Optional[str] = None
    message: Optional[str] = None
    date: str
    time: str
    durationMinutes: int
    alternativeSlots: list[SlotOption] = []


class DaySlot(BaseModel):
    time: str
    available: bool


class AvailableSlotsResponse(BaseModel):
    date: str
    isClosed: bool
    openTime: Optional[str] = None
    closeTime: Optional[str] = None
    durationMinutes: int
    slotIntervalMinutes: int
    slots: list[DaySlot] = []


class SlotReservationCreate(BaseModel):
    date: str
    time: str
    serviceId: Optional[int] = None
    durationMinutes: Optional[int] = Field(None, ge=5, le=480)
    appointmentType: Optional[str] = None

    @field_validator("date")
    @classmethod
    def check_date(cls, v):
        validate_date_string(v)
        return v

    @field_validator("time")
    @classmethod
    def check_time(cls, v):
        return validate_time_string(v)


class SlotReservationResponse(BaseModel):
    reservationId: int
    date: str
    time: str
    durationMinutes: int
    serviceId: Optional[int] = None
    expiresAt: datetime
    timeoutMinutes: int
    expiresIn: int  # seconds


# ============================================================================
# BOOKING NEGOTIATION
# Loosely typed on purpose: field rules are checked by the booking service so
# the caller gets a 400 with per-field messages instead of a 422.
# ============================================================================


class BookingClient(BaseModel):
    id: Optional[int] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None


class BookingPet(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    species: Optional[str] = None
    breed: Optional[str] = None
    size: Optional[str] = None


class BookingAddress(BaseModel):
    street_address: Optional[str] = None
    colonia_id: Optional[int] = None
    colonia_name_if_new: Optional[str] = None
    postal_code: Optional[str] = None


class Coordinates(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class BookingRequest(BaseModel):
    appointment_date: Optional[str] = None
    appointment_time: Optional[str] = None
    duration_minutes: Optional[int] = None
    service_id: Optional[int] = None
    appointment_types: list[str] = []
    client: Optional[BookingClient] = None
    pet: Optional[BookingPet] = None
    address: Optional[BookingAddress] = None
    collection_type: Optional[str] = None
    pickup_coordinates: Optional[Coordinates] = None
    notes: Optional[str] = None
    status: Optional[str] = None
    tags: list[str] = []


# ============================================================================
# APPOINTMENTS
# ============================================================================


class AppointmentCreate(BaseModel):
    """Direct staff-side create, no availability negotiation"""

    clientName: str = Field(..., min_length=1, max_length=255)
    clientPhone: Optional[str] = None
    clientEmail: Optional[str] = None
    petName: str = Field(..., min_length=1, max_length=255)
    petSpecies: Optional[str] = None
    petBreed: Optional[str] = None
    serviceId: Optional[int] = None
    roomId: Optional[int] = None
    staffId: Optional[int] = None
    type: str = "grooming"
    scheduledDate: date
    scheduledTime: str
    durationMinutes: Optional[int] = Field(None, ge=5, le=480)
    notes: Optional[str] = None
    services: Optional[list[str]] = None
    totalCost: Optional[float] = Field(None, ge=0)

    @field_validator("clientPhone")
    @classmethod
    def check_phone(cls, v):
        return validate_mx_phone(v)

    @field_validator("clientEmail")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("scheduledTime")
    @classmethod
    def check_time(cls, v):
        return validate_time_string(v)

    @field_validator("type")
    @classmethod
    def normalize_type(cls, v):
        return v.strip().lower()


class AppointmentUpdate(BaseModel):
    status: Optional[str] = None
    notes: Optional[str] = None
    roomId: Optional[int] = None
    staffId: Optional[int] = None
    durationMinutes: Optional[int] = Field(None, ge=5, le=480)
    services: Optional[list[str]] = None
    totalCost: Optional[float] = Field(None, ge=0)

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        if v is not None and v not in APPOINTMENT_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(APPOINTMENT_STATUSES)}")
        return v


class RescheduleRequest(BaseModel):
    scheduledDate: date
    scheduledTime: str
    reason: Optional[str] = None

    @field_validator("scheduledTime")
    @classmethod
    def check_time(cls, v):
        return validate_time_string(v)


class AppointmentResponse(BaseModel):
    id: int
    clientId: int
    clientName: Optional[str] = None
    petId: int
    petName: Optional[str] = None
    serviceId: Optional[int] = None
    serviceName: Optional[str] = None
    roomId: Optional[int] = None
    staffId: Optional[int] = None
    type: str
    status: str
    scheduledDate: str
    scheduledTime: str
    durationMinutes: int
    collectionType: Optional[str] = None
    notes: Optional[str] = None
    services: Optional[list] = None
    totalCost: Optional[float] = None
    created_at: Optional[datetime] = None
