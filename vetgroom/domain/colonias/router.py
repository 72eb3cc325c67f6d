"""Colonia router - address lookup for the intake form"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import TenantAccess, get_tenant_access, require_tenant_admin
from ...database import get_db
from ...models import Fraccionamiento
from .schemas import ColoniaCreate, ColoniaResponse
from .service import ColoniaService

router = APIRouter(prefix="/tenants/{tenant_id}/colonias", tags=["Colonias"])


def get_colonia_service(db: Session = Depends(get_db)) -> ColoniaService:
    return ColoniaService(db)


def colonia_response(colonia: Fraccionamiento) -> ColoniaResponse:
    return ColoniaResponse(
        id=colonia.id,
        name=colonia.name,
        postalCode=colonia.postal_code,
        zone=colonia.zone,
        weight=colonia.weight,
        latitude=colonia.latitude,
        longitude=colonia.longitude,
        deliveryDays=colonia.delivery_days,
    )


@router.get("", response_model=list[ColoniaResponse])
async def search_colonias(
    q: Optional[str] = Query(None, description="Name or postal code fragment"),
    access: TenantAccess = Depends(get_tenant_access),
    service: ColoniaService = Depends(get_colonia_service),
):
    return [colonia_response(c) for c in service.search(access.tenant_id, q)]


@router.post("", response_model=ColoniaResponse, status_code=201)
async def create_colonia(
    data: ColoniaCreate,
    access: TenantAccess = Depends(require_tenant_admin),
    service: ColoniaService = Depends(get_colonia_service),
):
    return colonia_response(service.create(access.tenant_id, data))
