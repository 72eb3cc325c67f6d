"""
Demo data for local development and sales demos.

seed_demo_data is keyed by tenant subdomain: running it twice returns the
existing tenant without inserting anything.
"""

import logging

from sqlalchemy.orm import Session

from .config import DEFAULT_TIMEZONE
from .domain.scheduling.availability_service import DEFAULT_BUSINESS_HOURS, DEFAULT_TYPE_CONFIGS
from .models import (
    Appointment,
    AppointmentTypeConfig,
    BusinessHours,
    Client,
    Company,
    Fraccionamiento,
    Pet,
    Room,
    Service,
    Staff,
    Tenant,
)
from .shared.timeutils import today_in_timezone

logger = logging.getLogger(__name__)

DEMO_COLONIAS = [
    {"name": "San Pedro Garza García", "postal_code": "66230", "zone": "Poniente", "weight": 4.8,
     "latitude": 25.6866, "longitude": -100.3161},
    {"name": "Residencial Cumbres", "postal_code": "64610", "zone": "Norponiente", "weight": 3.5,
     "latitude": 25.7617, "longitude": -100.2892},
    {"name": "Contry", "postal_code": "64860", "zone": "Sur", "weight": 2.0,
     "latitude": 25.6310, "longitude": -100.2780},
    {"name": "Mitras Centro", "postal_code": "64460", "zone": "Centro", "weight": 3.0,
     "latitude": 25.6943, "longitude": -100.3395},
    {"name": "Del Valle", "postal_code": "66220", "zone": "Poniente", "weight": 2.5,
     "latitude": 25.6525, "longitude": -100.3580},
]

DEMO_ROOMS = [
    {"name": "Consultorio 1", "type": "medical", "capacity": 1},
    {"name": "Sala de Vacunación", "type": "vaccination", "capacity": 2},
    {"name": "Sala de Grooming 1", "type": "grooming", "capacity": 2, "equipment": ["mesa", "secadora"]},
]

DEMO_STAFF = [
    {"name": "Dra. Ana García", "role": "veterinarian", "specialization": "Medicina general"},
    {"name": "Dr. Carlos Mendoza", "role": "veterinarian", "specialization": "Cirugía"},
    {"name": "María González", "role": "groomer", "specialization": "Estética canina"},
    {"name": "Patricia López", "role": "receptionist"},
    {"name": "Juan Torres", "role": "driver"},
]

DEMO_SERVICES = [
    {"name": "Consulta General", "type": "medical", "duration_minutes": 30, "price": 500.0},
    {"name": "Vacuna Antirrábica", "type": "vaccination", "duration_minutes": 15, "price": 200.0},
    {"name": "Baño y Secado", "type": "grooming", "duration_minutes": 60, "price": 400.0},
    {"name": "Baño + Corte + Uñas", "type": "grooming", "duration_minutes": 120, "price": 800.0},
]

# (client, pet, colonia index)
DEMO_CLIENTS = [
    ({"name": "Roberto Silva", "phone": "8112345678", "email": "roberto.silva@example.com",
      "address": "Calle Río Amazonas 120"},
     {"name": "Max", "species": "perro", "breed": "Golden Retriever", "size": "grande", "weight": 25.5}, 0),
    ({"name": "Carmen Morales", "phone": "8123456789", "email": "carmen.morales@example.com",
      "address": "Av. Paseo de los Leones 450"},
     {"name": "Buddy", "species": "perro", "breed": "Labrador", "size": "grande", "weight": 28.0}, 1),
    ({"name": "Miguel Hernández", "phone": "8134567890", "email": "miguel.hernandez@example.com",
      "address": "Calle Lago Ness 33"},
     {"name": "Mimi", "species": "gato", "breed": "Persa", "size": "chico", "weight": 3.8}, 2),
    ({"name": "Lucía Treviño", "phone": "8145678901", "email": None,
      "address": "Calle Venustiano Carranza 812"},
     {"name": "Rocky", "species": "perro", "breed": "Bulldog Francés", "size": "mediano", "weight": 12.3}, 3),
]

# (client index, service index, time, status)
DEMO_APPOINTMENTS = [
    (0, 2, "09:00", "completed"),
    (1, 3, "10:00", "completed"),
    (2, 0, "12:30", "confirmed"),
    (3, 1, "15:00", "scheduled"),
]


def seed_demo_data(db: Session, subdomain: str = "vetgroom1") -> Tenant:
    existing = db.query(Tenant).filter(Tenant.subdomain == subdomain).first()
    if existing:
        logger.info(f"⏭️ Demo tenant '{subdomain}' already exists (id={existing.id}), skipping")
        return existing

    company = Company(name="VetGroom Demo", email="demo@vetgroom.mx", phone="8100000000")
    db.add(company)
    db.flush()

    tenant = Tenant(
        company_id=company.id,
        name="VetGroom Monterrey",
        subdomain=subdomain,
        address="Av. Constitución 1500, Centro, Monterrey, N.L.",
        phone="8110000000",
        timezone=DEFAULT_TIMEZONE,
        reservation_timeout_minutes=5,
        concurrent_capacity=2,
        settings={"clinic_location": {"lat": 25.6866, "lng": -100.3161}},
    )
    db.add(tenant)
    db.flush()

    db.add_all(
        BusinessHours(
            tenant_id=tenant.id,
            day_of_week=d["dayOfWeek"],
            open_time=d["openTime"],
            close_time=d["closeTime"],
            is_closed=d["isClosed"],
        )
        for d in DEFAULT_BUSINESS_HOURS
    )
    db.add_all(
        AppointmentTypeConfig(
            tenant_id=tenant.id,
            appointment_type=name,
            default_duration_minutes=cfg["defaultDurationMinutes"],
            slot_interval_minutes=cfg["slotIntervalMinutes"],
        )
        for name, cfg in DEFAULT_TYPE_CONFIGS.items()
    )
    db.add_all(Room(tenant_id=tenant.id, **room) for room in DEMO_ROOMS)
    db.add_all(Staff(tenant_id=tenant.id, **member) for member in DEMO_STAFF)

    services = [Service(tenant_id=tenant.id, **s) for s in DEMO_SERVICES]
    colonias = [Fraccionamiento(tenant_id=tenant.id, **c) for c in DEMO_COLONIAS]
    db.add_all(services + colonias)
    db.flush()

    clients = []
    for client_data, pet_data, colonia_index in DEMO_CLIENTS:
        colonia = colonias[colonia_index]
        client = Client(
            tenant_id=tenant.id,
            fraccionamiento=colonia.name,
            postal_code=colonia.postal_code,
            latitude=colonia.latitude,
            longitude=colonia.longitude,
            **client_data,
        )
        client.pets.append(Pet(tenant_id=tenant.id, **pet_data))
        clients.append(client)
    db.add_all(clients)
    db.flush()

    today = today_in_timezone(tenant.timezone)
    for client_index, service_index, hhmm, status in DEMO_APPOINTMENTS:
        client = clients[client_index]
        service = services[service_index]
        db.add(
            Appointment(
                tenant_id=tenant.id,
                client_id=client.id,
                pet_id=client.pets[0].id,
                service_id=service.id,
                type=service.type,
                status=status,
                scheduled_date=today,
                scheduled_time=hhmm,
                duration_minutes=service.duration_minutes,
                collection_type="pickup" if service.type == "grooming" else None,
                services=[service.name],
                total_cost=service.price,
            )
        )

    db.commit()
    db.refresh(tenant)
    logger.info(f"✅ Seeded demo tenant '{subdomain}' (id={tenant.id})")
    return tenant
