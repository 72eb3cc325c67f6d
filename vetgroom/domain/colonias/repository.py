"""Colonia repository"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Fraccionamiento

SEARCH_LIMIT = 50


class ColoniaRepository:
    """Repository for colonia (fraccionamiento) lookups"""

    @staticmethod
    def search(db: Session, tenant_id: int, q: Optional[str] = None) -> list[Fraccionamiento]:
        query = db.query(Fraccionamiento).filter(
            Fraccionamiento.tenant_id == tenant_id,
            Fraccionamiento.is_active.is_(True),
        )
        if q:
            pattern = f"%{q.lower()}%"
            query = query.filter(
                or_(
                    func.lower(Fraccionamiento.name).like(pattern),
                    Fraccionamiento.postal_code.like(f"%{q}%"),
                )
            )
        return query.order_by(Fraccionamiento.name).limit(SEARCH_LIMIT).all()

    @staticmethod
    def get_by_id(db: Session, colonia_id: int, tenant_id: int) -> Optional[Fraccionamiento]:
        return (
            db.query(Fraccionamiento)
            .filter(Fraccionamiento.id == colonia_id, Fraccionamiento.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def get_by_name(db: Session, tenant_id: int, name: str) -> Optional[Fraccionamiento]:
        return (
            db.query(Fraccionamiento)
            .filter(
                Fraccionamiento.tenant_id == tenant_id,
                func.lower(Fraccionamiento.name) == name.lower(),
            )
            .first()
        )

    @staticmethod
    def get_weights(db: Session, tenant_id: int) -> dict[str, float]:
        rows = db.query(Fraccionamiento).filter(Fraccionamiento.tenant_id == tenant_id).all()
        return {r.name: r.weight for r in rows}

    @staticmethod
    def create(db: Session, tenant_id: int, commit: bool = True, **data) -> Fraccionamiento:
        colonia = Fraccionamiento(tenant_id=tenant_id, **data)
        db.add(colonia)
        if commit:
            db.commit()
            db.refresh(colonia)
        else:
            db.flush()
        return colonia
