"""Tenant domain schemas - companies, clinics and memberships"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import TENANT_ROLES
from ...shared.timeutils import TIMEZONE_CONFIGS
from ...shared.validators import validate_email, validate_mx_phone, validate_subdomain


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    followUpConfig: Optional[dict] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_mx_phone(v)


class CompanyResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    followUpConfig: Optional[dict] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TenantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    subdomain: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    timezone: Optional[str] = None

    @field_validator("subdomain")
    @classmethod
    def check_subdomain(cls, v):
        return validate_subdomain(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_mx_phone(v)

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v):
        if v and v not in TIMEZONE_CONFIGS:
            raise ValueError(f"Unknown timezone: {v}")
        return v


class ClinicLocation(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class TenantSettingsUpdate(BaseModel):
    timezone: Optional[str] = None
    reservationTimeoutMinutes: Optional[int] = Field(None, ge=1, le=120)
    concurrentCapacity: Optional[int] = Field(None, ge=1, le=50)
    clinicLocation: Optional[ClinicLocation] = None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v):
        if v and v not in TIMEZONE_CONFIGS:
            raise ValueError(f"Unknown timezone: {v}")
        return v


class TenantResponse(BaseModel):
    id: int
    companyId: int
    name: str
    subdomain: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    timezone: str
    reservationTimeoutMinutes: int
    concurrentCapacity: int
    settings: Optional[dict] = None
    role: Optional[str] = None


class MembershipCreate(BaseModel):
    email: str
    role: str = "staff"

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        if v not in TENANT_ROLES:
            raise ValueError(f"Role must be one of: {', '.join(TENANT_ROLES)}")
        return v


class MembershipResponse(BaseModel):
    id: int
    userId: int
    tenantId: int
    email: str
    role: str
    isActive: bool
