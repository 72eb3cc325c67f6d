"""Colonia service"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Fraccionamiento
from ...utils.sanitization import clean_text
from .repository import ColoniaRepository
from .schemas import ColoniaCreate

logger = logging.getLogger(__name__)


def normalize_colonia_name(name: str) -> str:
    return " ".join(word.capitalize() for word in name.split())


class ColoniaService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ColoniaRepository()

    def search(self, tenant_id: int, q: Optional[str] = None) -> list[Fraccionamiento]:
        return self.repo.search(self.db, tenant_id, clean_text(q, 100))

    def create(self, tenant_id: int, data: ColoniaCreate) -> Fraccionamiento:
        name = normalize_colonia_name(clean_text(data.name, 255) or "")
        if not name:
            raise HTTPException(status_code=400, detail="El nombre de la colonia es requerido")
        if self.repo.get_by_name(self.db, tenant_id, name):
            raise HTTPException(status_code=409, detail=f"La colonia '{name}' ya existe")

        colonia = self.repo.create(
            self.db,
            tenant_id,
            name=name,
            postal_code=data.postalCode,
            zone=clean_text(data.zone, 100),
            weight=data.weight,
            latitude=data.latitude,
            longitude=data.longitude,
            delivery_days=data.deliveryDays,
        )
        logger.info(f"🏘️ Colonia '{name}' created for tenant {tenant_id}")
        return colonia

    def resolve_for_booking(
        self,
        tenant_id: int,
        colonia_id: Optional[int] = None,
        new_name: Optional[str] = None,
        postal_code: Optional[str] = None,
    ) -> Optional[Fraccionamiento]:
        """
        Colonia chosen on the intake form: an existing one by id, or one typed
        in by the client. Typed names are reused when they already exist.
        Flushes only; the booking commits.
        """
        if colonia_id is not None:
            return self.repo.get_by_id(self.db, colonia_id, tenant_id)

        name = normalize_colonia_name(clean_text(new_name, 255) or "")
        if not name:
            return None
        existing = self.repo.get_by_name(self.db, tenant_id, name)
        if existing:
            return existing
        logger.info(f"🆕 Colonia '{name}' added from booking for tenant {tenant_id}")
        return self.repo.create(
            self.db, tenant_id, commit=False, name=name, postal_code=postal_code
        )
