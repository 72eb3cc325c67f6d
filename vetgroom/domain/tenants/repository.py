"""Tenant repository - Database operations for companies, tenants and memberships"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Company, Tenant, User, UserTenant


class TenantRepository:
    """Repository for tenant database operations"""

    @staticmethod
    def get_tenant(db: Session, tenant_id: int) -> Optional[Tenant]:
        return db.query(Tenant).filter(Tenant.id == tenant_id).first()

    @staticmethod
    def get_tenant_by_subdomain(db: Session, subdomain: str) -> Optional[Tenant]:
        return db.query(Tenant).filter(Tenant.subdomain == subdomain).first()

    @staticmethod
    def get_all_tenants(db: Session) -> list[Tenant]:
        return db.query(Tenant).order_by(Tenant.name).all()

    @staticmethod
    def get_user_memberships(db: Session, user_id: int) -> list[UserTenant]:
        """Active memberships for a user, with tenant loaded"""
        return (
            db.query(UserTenant)
            .join(Tenant, UserTenant.tenant_id == Tenant.id)
            .filter(UserTenant.user_id == user_id, UserTenant.is_active.is_(True))
            .order_by(Tenant.name)
            .all()
        )

    @staticmethod
    def update_tenant(db: Session, tenant: Tenant, **updates) -> Tenant:
        for key, value in updates.items():
            if value is not None and hasattr(tenant, key):
                setattr(tenant, key, value)
        db.commit()
        db.refresh(tenant)
        return tenant

    @staticmethod
    def create_company(db: Session, **company_data) -> Company:
        company = Company(**company_data)
        db.add(company)
        db.commit()
        db.refresh(company)
        return company

    @staticmethod
    def get_company(db: Session, company_id: int) -> Optional[Company]:
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def get_companies(db: Session) -> list[Company]:
        return db.query(Company).order_by(Company.name).all()

    @staticmethod
    def create_tenant(db: Session, company_id: int, **tenant_data) -> Tenant:
        tenant = Tenant(company_id=company_id, **tenant_data)
        db.add(tenant)
        db.commit()
        db.refresh(tenant)
        return tenant

    @staticmethod
    def get_company_tenants(db: Session, company_id: int) -> list[Tenant]:
        return db.query(Tenant).filter(Tenant.company_id == company_id).order_by(Tenant.name).all()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def get_membership(db: Session, user_id: int, tenant_id: int) -> Optional[UserTenant]:
        return (
            db.query(UserTenant)
            .filter(UserTenant.user_id == user_id, UserTenant.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def upsert_membership(db: Session, user_id: int, tenant_id: int, role: str) -> UserTenant:
        membership = TenantRepository.get_membership(db, user_id, tenant_id)
        if membership:
            membership.role = role
            membership.is_active = True
        else:
            membership = UserTenant(user_id=user_id, tenant_id=tenant_id, role=role)
            db.add(membership)
        db.commit()
        db.refresh(membership)
        return membership
