"""Colonia schemas"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_postal_code


class ColoniaCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    postalCode: Optional[str] = None
    zone: Optional[str] = Field(None, max_length=100)
    weight: float = Field(5.0, ge=0, le=100)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    deliveryDays: Optional[list[str]] = None

    @field_validator("postalCode")
    @classmethod
    def check_postal_code(cls, v):
        return validate_postal_code(v)


class ColoniaResponse(BaseModel):
    id: int
    name: str
    postalCode: Optional[str] = None
    zone: Optional[str] = None
    weight: float
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    deliveryDays: Optional[list[str]] = None
