"""Resource schemas - rooms, staff and the service catalogue"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import SERVICE_TYPES, STAFF_ROLES


def _check_service_type(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in SERVICE_TYPES:
        raise ValueError(f"Type must be one of: {', '.join(SERVICE_TYPES)}")
    return v


def _check_staff_role(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in STAFF_ROLES:
        raise ValueError(f"Role must be one of: {', '.join(STAFF_ROLES)}")
    return v


class RoomCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: str
    capacity: int = Field(1, ge=1, le=20)
    equipment: Optional[list[str]] = None

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return _check_service_type(v)


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1, le=20)
    equipment: Optional[list[str]] = None
    isActive: Optional[bool] = None

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return _check_service_type(v)


class RoomResponse(BaseModel):
    id: int
    name: str
    type: str
    capacity: int
    isActive: bool
    equipment: Optional[list] = None


class StaffCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    role: str
    specialization: Optional[str] = None
    userId: Optional[int] = None

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        return _check_staff_role(v)


class StaffUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[str] = None
    specialization: Optional[str] = None
    isActive: Optional[bool] = None

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        return _check_staff_role(v)


class StaffResponse(BaseModel):
    id: int
    name: str
    role: str
    specialization: Optional[str] = None
    isActive: bool
    userId: Optional[int] = None


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: str
    durationMinutes: int = Field(60, ge=5, le=480)
    price: float = Field(0.0, ge=0)

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return _check_service_type(v)


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = None
    durationMinutes: Optional[int] = Field(None, ge=5, le=480)
    price: Optional[float] = Field(None, ge=0)
    isActive: Optional[bool] = None

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return _check_service_type(v)


class ServiceResponse(BaseModel):
    id: int
    name: str
    type: str
    durationMinutes: int
    price: float
    isActive: bool
