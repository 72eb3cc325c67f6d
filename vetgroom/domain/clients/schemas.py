"""Client domain schemas - Pydantic models for client/pet intake"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email, validate_mx_phone, validate_postal_code


class ClientCreate(BaseModel):
    """Schema for creating a new client"""

    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    fraccionamiento: Optional[str] = None
    postalCode: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_mx_phone(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("postalCode")
    @classmethod
    def check_postal_code(cls, v):
        return validate_postal_code(v)


class ClientUpdate(BaseModel):
    """Schema for updating an existing client"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    fraccionamiento: Optional[str] = None
    postalCode: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_mx_phone(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("postalCode")
    @classmethod
    def check_postal_code(cls, v):
        return validate_postal_code(v)


class PetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    species: Optional[str] = None
    breed: Optional[str] = None
    size: Optional[str] = None
    age: Optional[int] = Field(None, ge=0, le=40)
    weight: Optional[float] = Field(None, gt=0, le=150)
    medicalHistory: Optional[list] = None


class PetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    species: Optional[str] = None
    breed: Optional[str] = None
    size: Optional[str] = None
    age: Optional[int] = Field(None, ge=0, le=40)
    weight: Optional[float] = Field(None, gt=0, le=150)
    medicalHistory: Optional[list] = None


class PetResponse(BaseModel):
    id: int
    clientId: int
    name: str
    species: Optional[str] = None
    breed: Optional[str] = None
    size: Optional[str] = None
    age: Optional[int] = None
    weight: Optional[float] = None
    medicalHistory: Optional[list] = None


class ClientResponse(BaseModel):
    """Schema for client response"""

    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    fraccionamiento: Optional[str] = None
    postalCode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[datetime] = None
    pets: list[PetResponse] = []
