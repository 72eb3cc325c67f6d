"""Inventory service - listings and bulk imports that replace a tenant's inventory"""

import logging
from typing import Optional

from fastapi import HTTPException
from openai import APIError, AsyncOpenAI
from sqlalchemy.orm import Session

from ...models import InventoryItem, InventoryTransaction
from .ai_importer import generate_inventory_items
from .csv_importer import parse_inventory_csv
from .repository import InventoryRepository

logger = logging.getLogger(__name__)

CSV_IMPORT_NOTE = "Stock inicial - Importación CSV"
AI_IMPORT_NOTE = "Stock inicial - Importación masiva con IA"


class InventoryService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = InventoryRepository()

    def get_items(self, tenant_id: int, category: Optional[str] = None) -> list[InventoryItem]:
        return self.repo.get_items(self.db, tenant_id, category)

    def get_transactions(self, tenant_id: int, limit: int = 100) -> list[InventoryTransaction]:
        return self.repo.get_transactions(self.db, tenant_id, limit)

    def replace_inventory(self, tenant_id: int, rows: list[dict], notes: str) -> list[InventoryItem]:
        """Swap the tenant's whole inventory for the imported rows in one transaction"""
        try:
            removed = self.repo.delete_tenant_inventory(self.db, tenant_id)
            items = self.repo.add_items(self.db, tenant_id, rows)
            self.repo.add_initial_purchases(self.db, tenant_id, items, notes)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"❌ Inventory replacement failed for tenant {tenant_id}")
            raise

        for item in items:
            self.db.refresh(item)
        logger.info(
            f"✅ Replaced inventory for tenant {tenant_id}: removed {removed}, imported {len(items)}"
        )
        return items

    def import_csv(self, tenant_id: int, csv_data: str) -> list[InventoryItem]:
        logger.info(f"📥 CSV inventory import for tenant {tenant_id}")
        return self.replace_inventory(tenant_id, parse_inventory_csv(csv_data), CSV_IMPORT_NOTE)

    async def import_with_ai(
        self, tenant_id: int, description: str, client: AsyncOpenAI
    ) -> list[InventoryItem]:
        logger.info(f"📥 AI inventory import for tenant {tenant_id}")
        try:
            rows = await generate_inventory_items(client, description)
        except APIError as e:
            logger.error(f"❌ OpenAI request failed for tenant {tenant_id}: {e}")
            raise HTTPException(status_code=502, detail="El servicio de IA no está disponible") from e
        return self.replace_inventory(tenant_id, rows, AI_IMPORT_NOTE)
