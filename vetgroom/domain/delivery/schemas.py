"""Delivery route schemas"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...models import ROUTE_STATUSES, STOP_STATUSES
from ...shared.validators import validate_time_string
from ..tenants.schemas import ClinicLocation


class DeliveryStopCreate(BaseModel):
    clientId: Optional[int] = None
    fraccionamientoId: Optional[int] = None
    appointmentId: Optional[int] = None
    stopOrder: Optional[int] = Field(None, ge=1)
    address: Optional[str] = Field(None, max_length=500)
    estimatedTime: Optional[str] = None
    services: Optional[list[str]] = None
    estimatedWeight: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("estimatedTime")
    @classmethod
    def check_time(cls, v):
        return validate_time_string(v)


class DeliveryStopUpdate(BaseModel):
    status: Optional[str] = None
    actualArrivalTime: Optional[datetime] = None
    actualCompletionTime: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        if v is not None and v not in STOP_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(STOP_STATUSES)}")
        return v


class DeliveryStopResponse(BaseModel):
    id: int
    clientId: Optional[int] = None
    clientName: Optional[str] = None
    fraccionamientoId: Optional[int] = None
    appointmentId: Optional[int] = None
    stopOrder: int
    address: Optional[str] = None
    estimatedTime: Optional[str] = None
    status: str
    services: Optional[list[str]] = None
    estimatedWeight: Optional[float] = None
    actualArrivalTime: Optional[datetime] = None
    actualCompletionTime: Optional[datetime] = None
    notes: Optional[str] = None


class DeliveryRouteCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    scheduledDate: date
    driverId: Optional[int] = None
    totalWeight: Optional[float] = Field(None, ge=0)
    estimatedDuration: Optional[int] = Field(None, ge=0)
    stops: list[DeliveryStopCreate] = []


class RouteStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        if v not in ROUTE_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(ROUTE_STATUSES)}")
        return v


class DeliveryRouteResponse(BaseModel):
    id: int
    name: str
    scheduledDate: date
    driverId: Optional[int] = None
    driverName: Optional[str] = None
    status: str
    totalWeight: Optional[float] = None
    estimatedDuration: Optional[int] = None
    actualDuration: Optional[int] = None
    actualStartTime: Optional[datetime] = None
    actualEndTime: Optional[datetime] = None
    stops: list[DeliveryStopResponse] = []


class RouteOptimizationRequest(BaseModel):
    date: date
    van_capacity: Literal["small", "medium", "large"] = "medium"
    clinic_location: Optional[ClinicLocation] = None
