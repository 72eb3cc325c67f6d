"""Client router - FastAPI endpoints for clients and pets"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import TenantAccess, get_tenant_access
from ...database import get_db
from ...models import Client, Pet
from .schemas import ClientCreate, ClientResponse, ClientUpdate, PetCreate, PetResponse, PetUpdate
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants/{tenant_id}", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


def pet_response(pet: Pet) -> PetResponse:
    return PetResponse(
        id=pet.id,
        clientId=pet.client_id,
        name=pet.name,
        species=pet.species,
        breed=pet.breed,
        size=pet.size,
        age=pet.age,
        weight=pet.weight,
        medicalHistory=pet.medical_history,
    )


def client_response(client: Client) -> ClientResponse:
    return ClientResponse(
        id=client.id,
        name=client.name,
        phone=client.phone,
        email=client.email,
        address=client.address,
        fraccionamiento=client.fraccionamiento,
        postalCode=client.postal_code,
        latitude=client.latitude,
        longitude=client.longitude,
        created_at=client.created_at,
        pets=[pet_response(p) for p in client.pets],
    )


# ============================================================================
# CLIENT LOOKUPS
# ============================================================================


@router.get("/clients/by-phone/{phone}", response_model=ClientResponse)
async def get_client_by_phone(
    phone: str,
    access: TenantAccess = Depends(get_tenant_access),
    service: ClientService = Depends(get_client_service),
):
    """Exact match on the normalized 10 digit phone"""
    return client_response(service.get_client_by_phone(access.tenant_id, phone))


@router.get("/clients/lookup", response_model=ClientResponse)
async def lookup_client(
    name: Optional[str] = Query(None),
    phone: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    access: TenantAccess = Depends(get_tenant_access),
    service: ClientService = Depends(get_client_service),
):
    """Find an existing customer before starting a new intake"""
    return client_response(service.lookup_client(access.tenant_id, name, phone, email))


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("/clients", response_model=list[ClientResponse])
async def get_clients(
    search: Optional[str] = Query(None, max_length=100),
    access: TenantAccess = Depends(get_tenant_access),
    service: ClientService = Depends(get_client_service),
):
    return [client_response(c) for c in service.get_clients(access.tenant_id, search)]


@router.post("/clients", response_model=ClientResponse, status_code=201)
async def create_client(
    data: ClientCreate,
    access: TenantAccess = Depends(get_tenant_access),
    service: ClientService = Depends(get_client_service),
):
    return client_response(service.create_client(access.tenant_id, data))


@router.get("/clients/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    access: TenantAccess = Depends(get_tenant_access),
    service: ClientService = Depends(get_client_service),
):
    return client_response(service.get_client(client_id, access.tenant_id))


@router.patch("/clients/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    access: TenantAccess = Depends(get_tenant_access),
    service: ClientService = Depends(get_client_service),
):
    return client_response(service.update_client(client_id, access.tenant_id, data))


@router.delete("/clients/{client_id}")
async def delete_client(
    client_id: int,
    access: TenantAccess = Depends(get_tenant_access),
    service: ClientService = Depends(get_client_service),
):
    return service.delete_client(client_id, access.tenant_id)


# ============================================================================
# PETS
# ============================================================================


@router.get("/pets", response_model=list[PetResponse])
async def get_pets(
    client_id: Optional[int] = Query(None),
    access: TenantAccess = Depends(get_tenant_access),
    service: ClientService = Depends(get_client_service),
):
    return [pet_response(p) for p in service.get_pets(access.tenant_id, client_id)]


@router.get("/clients/{client_id}/pets", response_model=list[PetResponse])
async def get_client_pets(
    client_id: int,
    access: TenantAccess = Depends(get_tenant_access),
    service: ClientService = Depends(get_client_service),
):
    return [pet_response(p) for p in service.get_pets(access.tenant_id, client_id)]


@router.post("/clients/{client_id}/pets", response_model=PetResponse, status_code=201)
async def create_pet(
    client_id: int,
    data: PetCreate,
    access: TenantAccess = Depends(get_tenant_access),
    service: ClientService = Depends(get_client_service),
):
    return pet_response(service.create_pet(access.tenant_id, client_id, data))


@router.patch("/pets/{pet_id}", response_model=PetResponse)
async def update_pet(
    pet_id: int,
    data: PetUpdate,
    access: TenantAccess = Depends(get_tenant_access),
    service: ClientService = Depends(get_client_service),
):
    return pet_response(service.update_pet(access.tenant_id, pet_id, data))
