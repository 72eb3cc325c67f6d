"""Tenant router - clinic selection, settings and company administration"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import (
    TenantAccess,
    get_current_user,
    get_tenant_access,
    require_superadmin,
    require_tenant_admin,
)
from ...database import get_db
from ...models import Company, Tenant, User, UserTenant
from .schemas import (
    CompanyCreate,
    CompanyResponse,
    MembershipCreate,
    MembershipResponse,
    TenantCreate,
    TenantResponse,
    TenantSettingsUpdate,
)
from .service import TenantService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tenants"])


def get_tenant_service(db: Session = Depends(get_db)) -> TenantService:
    """Dependency injection for TenantService"""
    return TenantService(db)


def _tenant_response(tenant: Tenant, role: Optional[str] = None) -> TenantResponse:
    return TenantResponse(
        id=tenant.id,
        companyId=tenant.company_id,
        name=tenant.name,
        subdomain=tenant.subdomain,
        address=tenant.address,
        phone=tenant.phone,
        email=tenant.email,
        timezone=tenant.timezone,
        reservationTimeoutMinutes=tenant.reservation_timeout_minutes,
        concurrentCapacity=tenant.concurrent_capacity,
        settings=tenant.settings,
        role=role,
    )


def _company_response(company: Company) -> CompanyResponse:
    return CompanyResponse(
        id=company.id,
        name=company.name,
        email=company.email,
        phone=company.phone,
        address=company.address,
        followUpConfig=company.follow_up_config,
        created_at=company.created_at,
    )


def _membership_response(membership: UserTenant) -> MembershipResponse:
    return MembershipResponse(
        id=membership.id,
        userId=membership.user_id,
        tenantId=membership.tenant_id,
        email=membership.user.email,
        role=membership.role,
        isActive=membership.is_active,
    )


# ============================================================================
# TENANT SELECTION & SETTINGS
# ============================================================================


@router.get("/tenants", response_model=list[TenantResponse])
async def list_my_tenants(
    current_user: User = Depends(get_current_user),
    service: TenantService = Depends(get_tenant_service),
):
    """Clinics the current user can access"""
    return [_tenant_response(t, role) for t, role in service.list_accessible_tenants(current_user)]


@router.get("/tenants/{tenant_id}", response_model=TenantResponse)
async def get_tenant(access: TenantAccess = Depends(get_tenant_access)):
    return _tenant_response(access.tenant, access.role)


@router.patch("/tenants/{tenant_id}/settings", response_model=TenantResponse)
async def update_tenant_settings(
    data: TenantSettingsUpdate,
    access: TenantAccess = Depends(require_tenant_admin),
    service: TenantService = Depends(get_tenant_service),
):
    """Update timezone, slot hold timeout, concurrent capacity or clinic location"""
    tenant = service.update_settings(access.tenant, data)
    return _tenant_response(tenant, access.role)


# ============================================================================
# COMPANY ADMINISTRATION (SUPER ADMIN)
# ============================================================================


@router.get("/companies", response_model=list[CompanyResponse])
async def list_companies(
    _: User = Depends(require_superadmin),
    service: TenantService = Depends(get_tenant_service),
):
    return [_company_response(c) for c in service.list_companies()]


@router.post("/companies", response_model=CompanyResponse, status_code=201)
async def create_company(
    data: CompanyCreate,
    _: User = Depends(require_superadmin),
    service: TenantService = Depends(get_tenant_service),
):
    return _company_response(service.create_company(data))


@router.get("/companies/{company_id}/tenants", response_model=list[TenantResponse])
async def list_company_tenants(
    company_id: int,
    _: User = Depends(require_superadmin),
    service: TenantService = Depends(get_tenant_service),
):
    return [_tenant_response(t) for t in service.list_company_tenants(company_id)]


@router.post("/companies/{company_id}/tenants", response_model=TenantResponse, status_code=201)
async def create_tenant(
    company_id: int,
    data: TenantCreate,
    _: User = Depends(require_superadmin),
    service: TenantService = Depends(get_tenant_service),
):
    return _tenant_response(service.create_tenant(company_id, data))


@router.post("/tenants/{tenant_id}/members", response_model=MembershipResponse, status_code=201)
async def add_tenant_member(
    tenant_id: int,
    data: MembershipCreate,
    _: User = Depends(require_superadmin),
    service: TenantService = Depends(get_tenant_service),
):
    """Grant a user access to a clinic with the given role"""
    return _membership_response(service.add_member(tenant_id, data))
