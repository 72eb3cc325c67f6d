"""Client repository - Database operations for clients and pets"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from ...models import Appointment, Client, Pet


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def get_clients(db: Session, tenant_id: int, search: Optional[str] = None) -> list[Client]:
        """Get clients for a tenant, optionally filtered by name, phone or email"""
        query = (
            db.query(Client)
            .options(selectinload(Client.pets))
            .filter(Client.tenant_id == tenant_id)
        )

        if search:
            term = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(Client.name).like(term),
                    func.lower(Client.email).like(term),
                    Client.phone.like(term),
                )
            )

        return query.order_by(Client.name).all()

    @staticmethod
    def get_client_by_id(db: Session, client_id: int, tenant_id: int) -> Optional[Client]:
        return (
            db.query(Client)
            .filter(Client.id == client_id, Client.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def get_client_by_phone(db: Session, tenant_id: int, phone: str) -> Optional[Client]:
        return (
            db.query(Client)
            .filter(Client.tenant_id == tenant_id, Client.phone == phone)
            .order_by(Client.id)
            .first()
        )

    @staticmethod
    def get_client_by_email(db: Session, tenant_id: int, email: str) -> Optional[Client]:
        return (
            db.query(Client)
            .filter(Client.tenant_id == tenant_id, func.lower(Client.email) == email.lower())
            .order_by(Client.id)
            .first()
        )

    @staticmethod
    def get_client_by_name(db: Session, tenant_id: int, name: str) -> Optional[Client]:
        return (
            db.query(Client)
            .filter(Client.tenant_id == tenant_id, func.lower(Client.name) == name.lower())
            .order_by(Client.id)
            .first()
        )

    @staticmethod
    def create_client(db: Session, tenant_id: int, commit: bool = True, **client_data) -> Client:
        client = Client(tenant_id=tenant_id, **client_data)
        db.add(client)
        if commit:
            db.commit()
            db.refresh(client)
        else:
            db.flush()
        return client

    @staticmethod
    def update_client(db: Session, client: Client, **updates) -> Client:
        """Update a client with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(client, key):
                setattr(client, key, value)

        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def count_appointments(db: Session, client_id: int) -> int:
        return (
            db.query(func.count(Appointment.id))
            .filter(Appointment.client_id == client_id)
            .scalar()
        )

    @staticmethod
    def delete_client(db: Session, client: Client) -> None:
        db.delete(client)
        db.commit()

    # Pets

    @staticmethod
    def get_pets(db: Session, tenant_id: int, client_id: Optional[int] = None) -> list[Pet]:
        query = db.query(Pet).filter(Pet.tenant_id == tenant_id)
        if client_id is not None:
            query = query.filter(Pet.client_id == client_id)
        return query.order_by(Pet.name).all()

    @staticmethod
    def get_pet_by_id(db: Session, pet_id: int, tenant_id: int) -> Optional[Pet]:
        return db.query(Pet).filter(Pet.id == pet_id, Pet.tenant_id == tenant_id).first()

    @staticmethod
    def get_pet_by_name(db: Session, client_id: int, name: str) -> Optional[Pet]:
        return (
            db.query(Pet)
            .filter(Pet.client_id == client_id, func.lower(Pet.name) == name.lower())
            .order_by(Pet.id)
            .first()
        )

    @staticmethod
    def create_pet(db: Session, tenant_id: int, client_id: int, commit: bool = True, **pet_data) -> Pet:
        pet = Pet(tenant_id=tenant_id, client_id=client_id, **pet_data)
        db.add(pet)
        if commit:
            db.commit()
            db.refresh(pet)
        else:
            db.flush()
        return pet

    @staticmethod
    def update_pet(db: Session, pet: Pet, **updates) -> Pet:
        for key, value in updates.items():
            if value is not None and hasattr(pet, key):
                setattr(pet, key, value)
        db.commit()
        db.refresh(pet)
        return pet
