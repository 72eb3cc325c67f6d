"""Receipt template repository"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import ReceiptTemplate


class ReceiptTemplateRepository:
    @staticmethod
    def _visible(db: Session, company_id: int, tenant_id: int):
        return db.query(ReceiptTemplate).filter(
            ReceiptTemplate.company_id == company_id,
            or_(ReceiptTemplate.tenant_id == tenant_id, ReceiptTemplate.tenant_id.is_(None)),
        )

    @staticmethod
    def get_templates(db: Session, company_id: int, tenant_id: int) -> list[ReceiptTemplate]:
        """Tenant templates plus company-wide ones"""
        return (
            ReceiptTemplateRepository._visible(db, company_id, tenant_id)
            .order_by(ReceiptTemplate.tenant_id.is_(None), ReceiptTemplate.name)
            .all()
        )

    @staticmethod
    def get_template(
        db: Session, template_id: int, company_id: int, tenant_id: int
    ) -> Optional[ReceiptTemplate]:
        return (
            ReceiptTemplateRepository._visible(db, company_id, tenant_id)
            .filter(ReceiptTemplate.id == template_id)
            .first()
        )

    @staticmethod
    def create_template(db: Session, **data) -> ReceiptTemplate:
        template = ReceiptTemplate(**data)
        db.add(template)
        db.commit()
        db.refresh(template)
        return template

    @staticmethod
    def update_template(db: Session, template: ReceiptTemplate, **updates) -> ReceiptTemplate:
        for key, value in updates.items():
            if value is not None:
                setattr(template, key, value)
        template.version = (template.version or 1) + 1
        db.commit()
        db.refresh(template)
        return template

    @staticmethod
    def delete_template(db: Session, template: ReceiptTemplate) -> None:
        db.delete(template)
        db.commit()
