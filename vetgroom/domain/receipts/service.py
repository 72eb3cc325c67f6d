"""Receipt template service"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Appointment, ReceiptTemplate, Tenant
from ...shared.timeutils import format_date_es
from ...utils.sanitization import clean_text
from .renderer import render_receipt
from .repository import ReceiptTemplateRepository
from .schemas import (
    ReceiptConfig,
    ReceiptLine,
    ReceiptRenderRequest,
    ReceiptTemplateCreate,
    ReceiptTemplateUpdate,
)

logger = logging.getLogger(__name__)


def template_config(template: ReceiptTemplate) -> ReceiptConfig:
    """Stored config merged over defaults; unknown keys are ignored"""
    stored = template.config or {}
    return ReceiptConfig(**{k: v for k, v in stored.items() if k in ReceiptConfig.model_fields})


class ReceiptTemplateService:
    def __init__(self, db: Session, tenant: Tenant):
        self.db = db
        self.tenant = tenant
        self.repo = ReceiptTemplateRepository()

    def list_templates(self) -> list[ReceiptTemplate]:
        return self.repo.get_templates(self.db, self.tenant.company_id, self.tenant.id)

    def get_template(self, template_id: int) -> ReceiptTemplate:
        template = self.repo.get_template(self.db, template_id, self.tenant.company_id, self.tenant.id)
        if not template:
            raise HTTPException(status_code=404, detail="Plantilla no encontrada")
        return template

    def create_template(self, data: ReceiptTemplateCreate) -> ReceiptTemplate:
        template = self.repo.create_template(
            self.db,
            company_id=self.tenant.company_id,
            tenant_id=None if data.companyWide else self.tenant.id,
            name=clean_text(data.name, 255),
            description=clean_text(data.description, 1000),
            template_type=data.templateType,
            is_active=data.isActive,
            version=1,
            config=data.config.model_dump(),
        )
        scope = "company-wide" if data.companyWide else f"tenant {self.tenant.id}"
        logger.info(f"🧾 Receipt template {template.id} created ({scope})")
        return template

    def update_template(self, template_id: int, data: ReceiptTemplateUpdate) -> ReceiptTemplate:
        template = self.get_template(template_id)
        template = self.repo.update_template(
            self.db,
            template,
            name=clean_text(data.name, 255),
            description=clean_text(data.description, 1000),
            is_active=data.isActive,
            config=data.config.model_dump() if data.config else None,
        )
        logger.info(f"🔄 Receipt template {template.id} updated to version {template.version}")
        return template

    def delete_template(self, template_id: int) -> dict:
        template = self.get_template(template_id)
        self.repo.delete_template(self.db, template)
        logger.info(f"🗑️ Receipt template {template_id} deleted")
        return {"message": "Plantilla eliminada"}

    def render(self, template_id: int, data: ReceiptRenderRequest) -> str:
        template = self.get_template(template_id)
        config = template_config(template)
        return render_receipt(
            config,
            data.items,
            business_name=config.business_name or self.tenant.name,
            client_name=data.client_name,
            pet_name=data.pet_name,
            staff_name=data.staff_name,
            date=data.date,
            folio=data.folio,
            payment_method=data.payment_method,
        )

    def render_for_appointment(self, template_id: int, appointment_id: int) -> str:
        template = self.get_template(template_id)
        appointment = (
            self.db.query(Appointment)
            .filter(Appointment.id == appointment_id, Appointment.tenant_id == self.tenant.id)
            .first()
        )
        if not appointment:
            raise HTTPException(status_code=404, detail="Cita no encontrada")

        service = appointment.service
        description = service.name if service else ", ".join(appointment.services or []) or "Servicio"
        if appointment.total_cost is not None:
            price = appointment.total_cost
        else:
            price = service.price if service else 0.0

        config = template_config(template)
        return render_receipt(
            config,
            [ReceiptLine(description=description, quantity=1, unit_price=price)],
            business_name=config.business_name or self.tenant.name,
            client_name=appointment.client.name if appointment.client else None,
            pet_name=appointment.pet.name if appointment.pet else None,
            staff_name=appointment.staff.name if appointment.staff else None,
            date=f"{format_date_es(appointment.scheduled_date)} {appointment.scheduled_time}",
            folio=f"A-{appointment.id:06d}",
        )
