"""Receipt template schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_hex_color


class ReceiptConfig(BaseModel):
    """Layout options stored in ReceiptTemplate.config; every key has a default"""

    business_name: Optional[str] = Field(None, max_length=255)  # Falls back to the tenant name
    header_text: Optional[str] = Field(None, max_length=1000)
    footer_text: Optional[str] = Field("¡Gracias por su preferencia!", max_length=1000)
    logo_url: Optional[str] = Field(None, max_length=500)
    accent_color: str = "#14B8A6"
    paper_width: Literal["58mm", "80mm", "a4"] = "80mm"
    currency: str = Field("MXN", min_length=3, max_length=3)
    show_tax: bool = True
    tax_rate: float = Field(0.16, ge=0, le=1)
    show_client: bool = True
    show_pet: bool = True
    show_staff: bool = False

    @field_validator("accent_color")
    @classmethod
    def check_color(cls, v):
        return validate_hex_color(v)

    @field_validator("logo_url")
    @classmethod
    def check_logo_url(cls, v):
        if v and not v.startswith(("https://", "http://")):
            raise ValueError("logo_url must be an http(s) URL")
        return v

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v):
        return v.upper()


class ReceiptTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    templateType: str = Field("receipt", max_length=50)
    companyWide: bool = False
    isActive: bool = True
    config: ReceiptConfig = Field(default_factory=ReceiptConfig)


class ReceiptTemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    isActive: Optional[bool] = None
    config: Optional[ReceiptConfig] = None


class ReceiptTemplateResponse(BaseModel):
    id: int
    companyId: int
    tenantId: Optional[int] = None
    name: str
    description: Optional[str] = None
    templateType: str
    isActive: bool
    version: int
    config: ReceiptConfig
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReceiptLine(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(1, ge=1, le=10000)
    unit_price: float = Field(..., ge=0)


class ReceiptRenderRequest(BaseModel):
    client_name: Optional[str] = None
    pet_name: Optional[str] = None
    staff_name: Optional[str] = None
    date: Optional[str] = None
    folio: Optional[str] = None
    payment_method: Optional[str] = None
    items: list[ReceiptLine] = Field(..., min_length=1)
