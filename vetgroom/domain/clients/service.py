"""Client service - Business logic for client/pet intake"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Client, Pet
from ...shared.validators import validate_email, validate_mx_phone
from ...utils.sanitization import clean_text
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate, PetCreate, PetUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_clients(self, tenant_id: int, search: Optional[str] = None) -> list[Client]:
        return self.repo.get_clients(self.db, tenant_id, clean_text(search, 100))

    def get_client(self, client_id: int, tenant_id: int) -> Client:
        client = self.repo.get_client_by_id(self.db, client_id, tenant_id)
        if not client:
            raise HTTPException(status_code=404, detail="Cliente no encontrado")
        return client

    def create_client(self, tenant_id: int, data: ClientCreate) -> Client:
        logger.info(f"📥 Creating client for tenant {tenant_id}")
        return self.repo.create_client(
            self.db,
            tenant_id,
            name=clean_text(data.name, 255),
            phone=data.phone,
            email=data.email,
            address=clean_text(data.address),
            fraccionamiento=clean_text(data.fraccionamiento, 255),
            postal_code=data.postalCode,
            latitude=data.latitude,
            longitude=data.longitude,
        )

    def update_client(self, client_id: int, tenant_id: int, data: ClientUpdate) -> Client:
        client = self.get_client(client_id, tenant_id)
        updates = {
            "name": clean_text(data.name, 255),
            "phone": data.phone,
            "email": data.email,
            "address": clean_text(data.address),
            "fraccionamiento": clean_text(data.fraccionamiento, 255),
            "postal_code": data.postalCode,
            "latitude": data.latitude,
            "longitude": data.longitude,
        }
        return self.repo.update_client(self.db, client, **updates)

    def delete_client(self, client_id: int, tenant_id: int) -> dict:
        client = self.get_client(client_id, tenant_id)
        if self.repo.count_appointments(self.db, client.id):
            raise HTTPException(
                status_code=409,
                detail="No se puede eliminar un cliente con citas registradas",
            )
        self.repo.delete_client(self.db, client)
        logger.info(f"🗑️ Deleted client {client_id} from tenant {tenant_id}")
        return {"message": "Cliente eliminado"}

    def get_client_by_phone(self, tenant_id: int, phone: str) -> Client:
        normalized = self._normalize_phone(phone)
        client = self.repo.get_client_by_phone(self.db, tenant_id, normalized)
        if not client:
            raise HTTPException(status_code=404, detail="Cliente no encontrado")
        return client

    def lookup_client(
        self,
        tenant_id: int,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Client:
        """Find an existing customer by phone, then email, then exact name"""
        if not (name or phone or email):
            raise HTTPException(status_code=400, detail="Proporciona nombre, teléfono o correo")

        client = self.match_client(
            tenant_id,
            clean_text(name, 255),
            self._normalize_phone(phone) if phone else None,
            self._normalize_email(email) if email else None,
        )
        if not client:
            raise HTTPException(status_code=404, detail="Cliente no encontrado")
        return client

    # Pets

    def get_pets(self, tenant_id: int, client_id: Optional[int] = None) -> list[Pet]:
        if client_id is not None:
            self.get_client(client_id, tenant_id)
        return self.repo.get_pets(self.db, tenant_id, client_id)

    def create_pet(self, tenant_id: int, client_id: int, data: PetCreate) -> Pet:
        client = self.get_client(client_id, tenant_id)
        return self.repo.create_pet(
            self.db,
            tenant_id,
            client.id,
            name=clean_text(data.name, 255),
            species=clean_text(data.species, 50),
            breed=clean_text(data.breed, 100),
            size=clean_text(data.size, 20),
            age=data.age,
            weight=data.weight,
            medical_history=data.medicalHistory,
        )

    def update_pet(self, tenant_id: int, pet_id: int, data: PetUpdate) -> Pet:
        pet = self.repo.get_pet_by_id(self.db, pet_id, tenant_id)
        if not pet:
            raise HTTPException(status_code=404, detail="Mascota no encontrada")
        updates = {
            "name": clean_text(data.name, 255),
            "species": clean_text(data.species, 50),
            "breed": clean_text(data.breed, 100),
            "size": clean_text(data.size, 20),
            "age": data.age,
            "weight": data.weight,
            "medical_history": data.medicalHistory,
        }
        return self.repo.update_pet(self.db, pet, **updates)

    # Used by booking flows. These flush but do not commit so the caller
    # can create the appointment in the same transaction.

    def find_or_create_client(
        self,
        tenant_id: int,
        name: str,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
        fraccionamiento: Optional[str] = None,
        postal_code: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> Client:
        name = clean_text(name, 255)
        client = self.match_client(tenant_id, name, phone, email)

        if client:
            # Keep the latest contact and address details on file
            for attr, value in (
                ("phone", phone),
                ("email", email),
                ("address", clean_text(address)),
                ("fraccionamiento", clean_text(fraccionamiento, 255)),
                ("postal_code", postal_code),
                ("latitude", latitude),
                ("longitude", longitude),
            ):
                if value is not None:
                    setattr(client, attr, value)
            self.db.flush()
            logger.info(f"👤 Using existing client {client.id} for tenant {tenant_id}")
            return client

        client = self.repo.create_client(
            self.db,
            tenant_id,
            commit=False,
            name=name,
            phone=phone,
            email=email,
            address=clean_text(address),
            fraccionamiento=clean_text(fraccionamiento, 255),
            postal_code=postal_code,
            latitude=latitude,
            longitude=longitude,
        )
        logger.info(f"🆕 Created client {client.id} for tenant {tenant_id}")
        return client

    def find_or_create_pet(
        self,
        tenant_id: int,
        client: Client,
        name: str,
        species: Optional[str] = None,
        breed: Optional[str] = None,
        size: Optional[str] = None,
    ) -> Pet:
        name = clean_text(name, 255)
        pet = self.repo.get_pet_by_name(self.db, client.id, name)
        if pet:
            return pet

        pet = self.repo.create_pet(
            self.db,
            tenant_id,
            client.id,
            commit=False,
            name=name,
            species=clean_text(species, 50) or "perro",
            breed=clean_text(breed, 100),
            size=clean_text(size, 20),
        )
        logger.info(f"🐾 Created pet {pet.id} for client {client.id}")
        return pet

    def match_client(
        self,
        tenant_id: int,
        name: Optional[str],
        phone: Optional[str],
        email: Optional[str],
    ) -> Optional[Client]:
        """Existing client by phone, then email, then exact name"""
        if phone:
            client = self.repo.get_client_by_phone(self.db, tenant_id, phone)
            if client:
                return client
        if email:
            client = self.repo.get_client_by_email(self.db, tenant_id, email)
            if client:
                return client
        if name:
            return self.repo.get_client_by_name(self.db, tenant_id, name)
        return None

    @staticmethod
    def _normalize_phone(phone: str) -> str:
        try:
            return validate_mx_phone(phone)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    @staticmethod
    def _normalize_email(email: str) -> str:
        try:
            return validate_email(email)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
