"""Receipt template router"""

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from ...auth import TenantAccess, get_tenant_access, require_tenant_admin
from ...database import get_db
from ...models import ReceiptTemplate
from .schemas import (
    ReceiptRenderRequest,
    ReceiptTemplateCreate,
    ReceiptTemplateResponse,
    ReceiptTemplateUpdate,
)
from .service import ReceiptTemplateService, template_config

router = APIRouter(prefix="/tenants/{tenant_id}/receipt-templates", tags=["Receipts"])


def _template_response(template: ReceiptTemplate) -> ReceiptTemplateResponse:
    return ReceiptTemplateResponse(
        id=template.id,
        companyId=template.company_id,
        tenantId=template.tenant_id,
        name=template.name,
        description=template.description,
        templateType=template.template_type,
        isActive=template.is_active,
        version=template.version,
        config=template_config(template),
        created_at=template.created_at,
        updated_at=template.updated_at,
    )


@router.get("", response_model=list[ReceiptTemplateResponse])
async def list_templates(
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return [_template_response(t) for t in ReceiptTemplateService(db, access.tenant).list_templates()]


@router.post("", response_model=ReceiptTemplateResponse, status_code=201)
async def create_template(
    data: ReceiptTemplateCreate,
    access: TenantAccess = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
):
    return _template_response(ReceiptTemplateService(db, access.tenant).create_template(data))


@router.get("/{template_id}", response_model=ReceiptTemplateResponse)
async def get_template(
    template_id: int,
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return _template_response(ReceiptTemplateService(db, access.tenant).get_template(template_id))


@router.patch("/{template_id}", response_model=ReceiptTemplateResponse)
async def update_template(
    template_id: int,
    data: ReceiptTemplateUpdate,
    access: TenantAccess = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
):
    return _template_response(ReceiptTemplateService(db, access.tenant).update_template(template_id, data))


@router.delete("/{template_id}")
async def delete_template(
    template_id: int,
    access: TenantAccess = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
):
    return ReceiptTemplateService(db, access.tenant).delete_template(template_id)


@router.post("/{template_id}/render", response_class=HTMLResponse)
async def render_template(
    template_id: int,
    data: ReceiptRenderRequest,
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return HTMLResponse(ReceiptTemplateService(db, access.tenant).render(template_id, data))


@router.get("/{template_id}/appointments/{appointment_id}", response_class=HTMLResponse)
async def render_appointment_receipt(
    template_id: int,
    appointment_id: int,
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    html = ReceiptTemplateService(db, access.tenant).render_for_appointment(template_id, appointment_id)
    return HTMLResponse(html)
