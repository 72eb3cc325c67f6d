"""
Booking service - one validate-and-create call behind the intake form.

The caller sends everything the form collected. Field problems come back as
400 with a message per field, an unavailable slot comes back as 202 with
suggested times, and an available slot is booked right away (200).
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Client, Pet, Service, Tenant
from ...shared.timeutils import format_date_es
from ...shared.validators import (
    validate_date_string,
    validate_email,
    validate_mx_phone,
    validate_postal_code,
    validate_time_string,
)
from ...utils.sanitization import clean_text
from ..clients.repository import ClientRepository
from ..clients.service import ClientService
from ..colonias.service import ColoniaService
from .appointment_service import serialize_appointment
from .availability_service import AvailabilityService
from .repository import SchedulingRepository
from .reservation_service import ReservationService
from .schemas import BookingRequest

logger = logging.getLogger(__name__)

BOOKABLE_TYPES = ("grooming", "medical")
COLLECTION_TYPES = ("pickup", "dropoff")
BOOKING_STATUSES = ("scheduled", "confirmed")


def _text(max_length: int):
    return lambda value: clean_text(value, max_length)


class BookingValidationError(Exception):
    """Collected field errors for a booking payload"""

    def __init__(self, field_errors: dict[str, str]):
        self.field_errors = field_errors
        super().__init__("Hay errores en el formulario")

    def to_body(self) -> dict:
        return {"error": {"message": str(self), "fieldErrors": self.field_errors}}


class BookingService:
    """Intake-form booking negotiation for one tenant"""

    def __init__(self, db: Session, tenant: Tenant):
        self.db = db
        self.tenant = tenant
        self.repo = SchedulingRepository()
        self.client_repo = ClientRepository()
        self.clients = ClientService(db)
        self.colonias = ColoniaService(db)
        self.availability = AvailabilityService(db, tenant)
        self.reservations = ReservationService(db, tenant)

    def negotiate(self, data: BookingRequest, session_id: Optional[str] = None) -> tuple[int, dict]:
        """Returns (status_code, body)"""
        try:
            form = self._validate(data)
        except BookingValidationError as e:
            logger.warning(f"⚠️ Booking rejected for tenant {self.tenant.id}: {list(e.field_errors)}")
            return 400, e.to_body()

        duration, interval = self.availability.resolve_timing(
            form["category"], data.duration_minutes, form["service"]
        )
        result = self.availability.check_availability(
            form["day"], form["time"], duration, interval, session_id=session_id
        )
        if not result.available:
            logger.info(
                f"📨 Slot {form['day'].isoformat()} {form['time']} unavailable ({result.reason}), "
                f"offering {len(result.alternatives)} alternatives"
            )
            if result.alternatives:
                message = f"{result.message}. Estos horarios están disponibles:"
            else:
                message = f"{result.message}. No encontramos horarios cercanos, intenta otra fecha."
            return 202, {"userFriendlyMessage": message, "appOptions": result.alternatives}

        appointment = self._book(data, form, duration)
        if session_id:
            self.reservations.release_session_slot(session_id, form["day"], form["time"])

        pet_name = appointment.pet.name if appointment.pet else ""
        message = (
            f"¡Listo! La cita de {pet_name} quedó agendada para el "
            f"{format_date_es(form['day'])} a las {form['time']}."
        )
        return 200, {"appointment": serialize_appointment(appointment), "userFriendlyMessage": message}

    # ========================================================================
    # VALIDATION
    # ========================================================================

    def _validate(self, data: BookingRequest) -> dict:
        errors: dict[str, str] = {}
        form: dict = {}

        client = data.client
        pet = data.pet
        address = data.address

        # Client
        existing_client: Optional[Client] = None
        if client and client.id is not None:
            existing_client = self.client_repo.get_client_by_id(self.db, client.id, self.tenant.id)
            if not existing_client:
                errors["client.id"] = "Cliente no encontrado"

        name = self._field(errors, "client.full_name", _text(255), client.full_name if client else None)
        if not name and existing_client:
            name = existing_client.name
        if not name and "client.full_name" not in errors:
            errors["client.full_name"] = "El nombre del cliente es requerido"
        form["client_name"] = name

        phone = client.phone_number if client else None
        email = client.email if client else None
        if not phone and not email and not existing_client:
            errors["client.contact"] = "Proporciona un teléfono o un correo"
        form["phone"] = self._field(errors, "client.phone_number", validate_mx_phone, phone) or None
        form["email"] = self._field(errors, "client.email", validate_email, email) or None
        form["existing_client"] = existing_client

        # Pet
        existing_pet: Optional[Pet] = None
        if pet and pet.id is not None:
            existing_pet = self.client_repo.get_pet_by_id(self.db, pet.id, self.tenant.id)
            if not existing_pet or (existing_client and existing_pet.client_id != existing_client.id):
                errors["pet.id"] = "Mascota no encontrada"
                existing_pet = None
        if existing_pet and not existing_client and "client.id" not in errors:
            # The pet must belong to whichever client this booking resolves to
            owner = self.clients.match_client(self.tenant.id, name, form["phone"], form["email"])
            if not owner or owner.id != existing_pet.client_id:
                errors["pet.id"] = "La mascota no pertenece a este cliente"
                existing_pet = None

        pet_name = self._field(errors, "pet.name", _text(255), pet.name if pet else None)
        if not pet_name and existing_pet:
            pet_name = existing_pet.name
        if not pet_name and "pet.name" not in errors:
            errors["pet.name"] = "El nombre de la mascota es requerido"
        if not (pet and pet.id is not None):
            if not (pet and pet.breed and pet.breed.strip()):
                errors["pet.breed"] = "La raza es requerida para una mascota nueva"
            if not (pet and pet.size and pet.size.strip()):
                errors["pet.size"] = "El tamaño es requerido para una mascota nueva"
        form["pet_name"] = pet_name
        form["existing_pet"] = existing_pet

        # Appointment types
        types = {t.strip().lower() for t in data.appointment_types if t and t.strip()}
        if not types:
            errors["appointment_types"] = "Selecciona al menos un tipo de cita"
        elif not types.issubset(BOOKABLE_TYPES):
            errors["appointment_types"] = "Los tipos de cita válidos son Grooming y Medical"
        if len(types) > 1:
            form["category"] = "hybrid"
        else:
            form["category"] = next(iter(types), "grooming")

        # Collection and address
        collection = (data.collection_type or "").strip().lower() or None
        if collection and collection not in COLLECTION_TYPES:
            errors["collection_type"] = "El tipo de recolección debe ser pickup o dropoff"
        form["collection_type"] = collection

        postal_code = address.postal_code if address else None
        form["postal_code"] = self._field(errors, "address.postal_code", validate_postal_code, postal_code) or None
        if collection == "pickup" and "grooming" in types:
            coords = data.pickup_coordinates
            if not coords or coords.latitude is None or coords.longitude is None:
                errors["pickup_coordinates"] = "Las coordenadas son requeridas para recolección a domicilio"
            if not postal_code:
                errors["address.postal_code"] = "El código postal es requerido para recolección a domicilio"

        if address:
            self._field(errors, "address.street_address", _text(500), address.street_address)
            self._field(errors, "address.colonia_name_if_new", _text(255), address.colonia_name_if_new)
        if address and address.colonia_id is not None:
            if not self.colonias.repo.get_by_id(self.db, address.colonia_id, self.tenant.id):
                errors["address.colonia_id"] = "Colonia no encontrada"

        if data.notes:
            self._field(errors, "notes", _text(2000), data.notes)
        if any(len(t.strip()) > 50 for t in data.tags if t):
            errors["tags"] = "Cada etiqueta debe tener máximo 50 caracteres"

        # Date and time
        if not data.appointment_date:
            errors["appointment_date"] = "La fecha es requerida"
        else:
            form["day"] = self._field(errors, "appointment_date", validate_date_string, data.appointment_date)
        if not data.appointment_time:
            errors["appointment_time"] = "La hora es requerida"
        else:
            form["time"] = self._field(errors, "appointment_time", validate_time_string, data.appointment_time)

        if data.duration_minutes is not None and not 5 <= data.duration_minutes <= 480:
            errors["duration_minutes"] = "La duración debe estar entre 5 y 480 minutos"

        # Service
        form["service"] = None
        if data.service_id is not None:
            service = (
                self.db.query(Service)
                .filter(Service.id == data.service_id, Service.tenant_id == self.tenant.id)
                .first()
            )
            if not service:
                errors["service_id"] = "Servicio no encontrado"
            form["service"] = service

        status = (data.status or "scheduled").strip().lower()
        if status not in BOOKING_STATUSES:
            errors["status"] = "Una cita nueva solo puede quedar como scheduled o confirmed"
        form["status"] = status

        if errors:
            raise BookingValidationError(errors)
        return form

    @staticmethod
    def _field(errors: dict, key: str, validator, value):
        try:
            return validator(value)
        except ValueError as e:
            errors[key] = str(e)
            return None

    # ========================================================================
    # BOOKING
    # ========================================================================

    def _book(self, data: BookingRequest, form: dict, duration: int):
        address = data.address
        coords = data.pickup_coordinates
        colonia = None
        if address:
            colonia = self.colonias.resolve_for_booking(
                self.tenant.id,
                colonia_id=address.colonia_id,
                new_name=address.colonia_name_if_new,
                postal_code=form["postal_code"],
            )

        client_fields = {
            "phone": form["phone"],
            "email": form["email"],
            "address": address.street_address if address else None,
            "fraccionamiento": colonia.name if colonia else None,
            "postal_code": form["postal_code"],
            "latitude": coords.latitude if coords else None,
            "longitude": coords.longitude if coords else None,
        }
        client = form["existing_client"]
        if client:
            for attr, value in client_fields.items():
                if attr in ("address", "fraccionamiento"):
                    value = clean_text(value, 255 if attr == "fraccionamiento" else 500)
                if value is not None:
                    setattr(client, attr, value)
            self.db.flush()
        else:
            client = self.clients.find_or_create_client(
                self.tenant.id, form["client_name"], **client_fields
            )

        pet = form["existing_pet"]
        if pet and pet.client_id != client.id:
            logger.warning(f"⚠️ Pet {pet.id} is not owned by client {client.id}, registering by name instead")
            pet = None
        if not pet:
            pet_data = data.pet
            pet = self.clients.find_or_create_pet(
                self.tenant.id,
                client,
                form["pet_name"],
                species=pet_data.species if pet_data else None,
                breed=pet_data.breed if pet_data else None,
                size=pet_data.size if pet_data else None,
            )

        service: Optional[Service] = form["service"]
        types = sorted({t.strip().lower() for t in data.appointment_types if t and t.strip()})

        notes = clean_text(data.notes, 2000)
        tags = [clean_text(t, 50) for t in data.tags if t and t.strip()]
        if tags:
            notes = f"{notes}\nEtiquetas: {', '.join(tags)}" if notes else f"Etiquetas: {', '.join(tags)}"

        appointment = self.repo.add_appointment(
            self.db,
            tenant_id=self.tenant.id,
            client_id=client.id,
            pet_id=pet.id,
            service_id=service.id if service else None,
            type=form["category"],
            status=form["status"],
            scheduled_date=form["day"],
            scheduled_time=form["time"],
            duration_minutes=duration,
            collection_type=form["collection_type"],
            notes=notes,
            services=[service.name] if service else [t.capitalize() for t in types],
            total_cost=service.price if service else None,
        )
        self.db.commit()
        self.db.refresh(appointment)
        logger.info(
            f"✅ Booked appointment {appointment.id} ({form['category']}) on "
            f"{form['day'].isoformat()} {form['time']} for tenant {self.tenant.id}"
        )
        return appointment
