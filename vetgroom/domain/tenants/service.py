"""Tenant service - Business logic for companies, clinics and memberships"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...cache import invalidate_tenant_cache
from ...config import DEFAULT_CONCURRENT_CAPACITY, DEFAULT_RESERVATION_TIMEOUT_MINUTES
from ...models import Company, Tenant, User, UserTenant
from ...shared.timeutils import resolve_timezone
from .repository import TenantRepository
from .schemas import CompanyCreate, MembershipCreate, TenantCreate, TenantSettingsUpdate

logger = logging.getLogger(__name__)


class TenantService:
    """Service layer for tenant business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TenantRepository()

    def list_accessible_tenants(self, user: User) -> list[tuple[Tenant, str]]:
        """Tenants the user can open, paired with the user's role in each"""
        if user.is_superadmin:
            return [(t, "owner") for t in self.repo.get_all_tenants(self.db)]
        return [(m.tenant, m.role) for m in self.repo.get_user_memberships(self.db, user.id)]

    def update_settings(self, tenant: Tenant, data: TenantSettingsUpdate) -> Tenant:
        updates = {
            "timezone": data.timezone,
            "reservation_timeout_minutes": data.reservationTimeoutMinutes,
            "concurrent_capacity": data.concurrentCapacity,
        }
        if data.clinicLocation is not None:
            settings = dict(tenant.settings or {})
            settings["clinic_location"] = data.clinicLocation.model_dump()
            updates["settings"] = settings

        tenant = self.repo.update_tenant(self.db, tenant, **updates)
        invalidate_tenant_cache(tenant.id)
        logger.info(f"⚙️ Updated settings for tenant {tenant.id}")
        return tenant

    # Company management (super admin)

    def create_company(self, data: CompanyCreate) -> Company:
        company = self.repo.create_company(
            self.db,
            name=data.name,
            email=data.email,
            phone=data.phone,
            address=data.address,
            follow_up_config=data.followUpConfig,
        )
        logger.info(f"🏢 Created company {company.id}: {company.name}")
        return company

    def get_company(self, company_id: int) -> Company:
        company = self.repo.get_company(self.db, company_id)
        if not company:
            raise HTTPException(status_code=404, detail="Company not found")
        return company

    def list_companies(self) -> list[Company]:
        return self.repo.get_companies(self.db)

    def create_tenant(self, company_id: int, data: TenantCreate) -> Tenant:
        self.get_company(company_id)
        if self.repo.get_tenant_by_subdomain(self.db, data.subdomain):
            raise HTTPException(status_code=409, detail="Subdomain already in use")

        tenant = self.repo.create_tenant(
            self.db,
            company_id,
            name=data.name,
            subdomain=data.subdomain,
            address=data.address,
            phone=data.phone,
            email=data.email,
            timezone=resolve_timezone(data.timezone),
            reservation_timeout_minutes=DEFAULT_RESERVATION_TIMEOUT_MINUTES,
            concurrent_capacity=DEFAULT_CONCURRENT_CAPACITY,
        )
        logger.info(f"🏥 Created tenant {tenant.id} ({tenant.subdomain}) for company {company_id}")
        return tenant

    def list_company_tenants(self, company_id: int) -> list[Tenant]:
        self.get_company(company_id)
        return self.repo.get_company_tenants(self.db, company_id)

    def add_member(self, tenant_id: int, data: MembershipCreate) -> UserTenant:
        if not self.repo.get_tenant(self.db, tenant_id):
            raise HTTPException(status_code=404, detail="Tenant not found")
        user = self.repo.get_user_by_email(self.db, data.email)
        if not user:
            raise HTTPException(
                status_code=404, detail="User not found. They must sign in once before being added."
            )
        membership = self.repo.upsert_membership(self.db, user.id, tenant_id, data.role)
        logger.info(f"👥 User {user.id} added to tenant {tenant_id} as {data.role}")
        return membership
