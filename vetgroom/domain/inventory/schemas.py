"""Inventory schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class InventoryItemResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category: str
    sku: Optional[str] = None
    unitPrice: float
    currentStock: int
    minStockLevel: int
    maxStockLevel: int
    unit: str
    supplier: Optional[str] = None
    lowStock: bool = False
    created_at: Optional[datetime] = None


class InventoryTransactionResponse(BaseModel):
    id: int
    itemId: int
    itemName: Optional[str] = None
    type: str
    quantity: int
    unitPrice: float
    totalAmount: float
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class CsvImportRequest(BaseModel):
    csv_data: str = Field(..., min_length=1, max_length=2_000_000)


class AiImportRequest(BaseModel):
    description: str = Field(..., min_length=3, max_length=4000)


class ImportResponse(BaseModel):
    message: str
    imported: int
    items: list[InventoryItemResponse]
