"""Inventory repository"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import InventoryItem, InventoryTransaction


class InventoryRepository:
    """Repository for inventory items and stock transactions"""

    @staticmethod
    def get_items(db: Session, tenant_id: int, category: Optional[str] = None) -> list[InventoryItem]:
        query = db.query(InventoryItem).filter(InventoryItem.tenant_id == tenant_id)
        if category:
            query = query.filter(InventoryItem.category == category)
        return query.order_by(InventoryItem.category, InventoryItem.name).all()

    @staticmethod
    def get_transactions(db: Session, tenant_id: int, limit: int = 100) -> list[InventoryTransaction]:
        return (
            db.query(InventoryTransaction)
            .options(joinedload(InventoryTransaction.item))
            .filter(InventoryTransaction.tenant_id == tenant_id)
            .order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def delete_tenant_inventory(db: Session, tenant_id: int) -> int:
        """Removes items and their transactions; does not commit"""
        db.query(InventoryTransaction).filter(InventoryTransaction.tenant_id == tenant_id).delete(
            synchronize_session=False
        )
        return (
            db.query(InventoryItem)
            .filter(InventoryItem.tenant_id == tenant_id)
            .delete(synchronize_session=False)
        )

    @staticmethod
    def add_items(db: Session, tenant_id: int, rows: list[dict]) -> list[InventoryItem]:
        items = [InventoryItem(tenant_id=tenant_id, **row) for row in rows]
        db.add_all(items)
        db.flush()
        return items

    @staticmethod
    def add_initial_purchases(
        db: Session, tenant_id: int, items: list[InventoryItem], notes: str
    ) -> list[InventoryTransaction]:
        transactions = [
            InventoryTransaction(
                tenant_id=tenant_id,
                item_id=item.id,
                type="purchase",
                quantity=item.current_stock,
                unit_price=item.unit_price,
                total_amount=round(item.current_stock * item.unit_price, 2),
                notes=notes,
            )
            for item in items
        ]
        db.add_all(transactions)
        db.flush()
        return transactions
