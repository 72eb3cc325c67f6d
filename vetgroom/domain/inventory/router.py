"""Inventory router - listings plus CSV and AI bulk imports"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from openai import AsyncOpenAI
from sqlalchemy.orm import Session

from ...auth import TenantAccess, get_tenant_access, require_tenant_admin
from ...config import OPENAI_API_KEY, OPENAI_TIMEOUT_SECONDS
from ...database import get_db
from ...models import InventoryItem, InventoryTransaction
from ...rate_limiter import create_rate_limiter
from .csv_importer import InventoryImportError
from .schemas import (
    AiImportRequest,
    CsvImportRequest,
    ImportResponse,
    InventoryItemResponse,
    InventoryTransactionResponse,
)
from .service import InventoryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants/{tenant_id}/inventory", tags=["Inventory"])

rate_limit_ai_import = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="ai_inventory")


def get_inventory_service(db: Session = Depends(get_db)) -> InventoryService:
    return InventoryService(db)


async def get_openai_client():
    if not OPENAI_API_KEY:
        raise HTTPException(
            status_code=503, detail="La importación con IA no está configurada (OPENAI_API_KEY)"
        )
    client = AsyncOpenAI(api_key=OPENAI_API_KEY, timeout=OPENAI_TIMEOUT_SECONDS)
    try:
        yield client
    finally:
        await client.close()


def item_response(item: InventoryItem) -> InventoryItemResponse:
    return InventoryItemResponse(
        id=item.id,
        name=item.name,
        description=item.description,
        category=item.category,
        sku=item.sku,
        unitPrice=item.unit_price,
        currentStock=item.current_stock,
        minStockLevel=item.min_stock_level,
        maxStockLevel=item.max_stock_level,
        unit=item.unit,
        supplier=item.supplier,
        lowStock=item.current_stock <= item.min_stock_level,
        created_at=item.created_at,
    )


def _transaction_response(tx: InventoryTransaction) -> InventoryTransactionResponse:
    return InventoryTransactionResponse(
        id=tx.id,
        itemId=tx.item_id,
        itemName=tx.item.name if tx.item else None,
        type=tx.type,
        quantity=tx.quantity,
        unitPrice=tx.unit_price,
        totalAmount=tx.total_amount,
        notes=tx.notes,
        created_at=tx.created_at,
    )


def _import_response(items: list[InventoryItem], source: str) -> ImportResponse:
    return ImportResponse(
        message=f"Se importaron {len(items)} productos ({source})",
        imported=len(items),
        items=[item_response(i) for i in items],
    )


@router.get("/items", response_model=list[InventoryItemResponse])
async def list_items(
    category: Optional[str] = Query(None),
    access: TenantAccess = Depends(get_tenant_access),
    service: InventoryService = Depends(get_inventory_service),
):
    return [item_response(i) for i in service.get_items(access.tenant_id, category)]


@router.get("/transactions", response_model=list[InventoryTransactionResponse])
async def list_transactions(
    limit: int = Query(100, ge=1, le=500),
    access: TenantAccess = Depends(get_tenant_access),
    service: InventoryService = Depends(get_inventory_service),
):
    return [_transaction_response(t) for t in service.get_transactions(access.tenant_id, limit)]


@router.post("/import/csv", response_model=ImportResponse)
async def import_csv(
    data: CsvImportRequest,
    access: TenantAccess = Depends(require_tenant_admin),
    service: InventoryService = Depends(get_inventory_service),
):
    try:
        items = service.import_csv(access.tenant_id, data.csv_data)
    except InventoryImportError as e:
        logger.warning(f"⚠️ CSV import rejected for tenant {access.tenant_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _import_response(items, "CSV")


@router.post("/import/ai", response_model=ImportResponse)
async def import_with_ai(
    data: AiImportRequest,
    access: TenantAccess = Depends(require_tenant_admin),
    service: InventoryService = Depends(get_inventory_service),
    client: AsyncOpenAI = Depends(get_openai_client),
    _: None = Depends(rate_limit_ai_import),
):
    try:
        items = await service.import_with_ai(access.tenant_id, data.description, client)
    except InventoryImportError as e:
        logger.warning(f"⚠️ AI import rejected for tenant {access.tenant_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _import_response(items, "IA")
