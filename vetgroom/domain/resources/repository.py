"""Resource repository - rooms, staff and services share the same access pattern"""

from typing import Optional, TypeVar

from sqlalchemy.orm import Session

from ...models import Room, Service, Staff

Resource = TypeVar("Resource", Room, Staff, Service)


class ResourceRepository:
    """Repository for tenant-scoped, soft-deletable resources"""

    @staticmethod
    def list_resources(
        db: Session, model: type[Resource], tenant_id: int, include_inactive: bool = False
    ) -> list[Resource]:
        query = db.query(model).filter(model.tenant_id == tenant_id)
        if not include_inactive:
            query = query.filter(model.is_active.is_(True))
        return query.order_by(model.name).all()

    @staticmethod
    def get_resource(
        db: Session, model: type[Resource], resource_id: int, tenant_id: int
    ) -> Optional[Resource]:
        return (
            db.query(model)
            .filter(model.id == resource_id, model.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def create_resource(db: Session, model: type[Resource], tenant_id: int, **data) -> Resource:
        resource = model(tenant_id=tenant_id, **data)
        db.add(resource)
        db.commit()
        db.refresh(resource)
        return resource

    @staticmethod
    def update_resource(db: Session, resource: Resource, **updates) -> Resource:
        for key, value in updates.items():
            if value is not None and hasattr(resource, key):
                setattr(resource, key, value)
        db.commit()
        db.refresh(resource)
        return resource
