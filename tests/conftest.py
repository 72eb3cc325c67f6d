"""
Shared fixtures.

The environment is pinned before the application is imported: an in-memory
SQLite database, no Redis-backed rate limiting or caching, and no OpenAI key.
Firebase is bypassed by overriding get_current_user with a lookup of the
user chosen through the `login` fixture.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CACHE_ENABLED"] = "false"
os.environ["SECURITY_HEADERS_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ.pop("OPENAI_API_KEY", None)

from datetime import date, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi import Depends, HTTPException  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from vetgroom.auth import get_current_user  # noqa: E402
from vetgroom.database import Base, SessionLocal, engine, get_db  # noqa: E402
from vetgroom.main import app  # noqa: E402
from vetgroom.models import (  # noqa: E402
    Appointment,
    Client,
    Company,
    Pet,
    Service,
    Tenant,
    User,
    UserTenant,
)
from vetgroom.shared.timeutils import today_in_timezone  # noqa: E402

_current = {"user_id": None}


def _override_current_user(db: Session = Depends(get_db)) -> User:
    user = db.query(User).filter(User.id == _current["user_id"]).first()
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def next_open_day(start: date, days_ahead: int = 2) -> date:
    """A future weekday the default business hours keep open (not Sunday)"""
    day = start + timedelta(days=days_ahead)
    while day.weekday() == 6:
        day += timedelta(days=1)
    return day


def make_user(db: Session, tenant: Tenant, email: str, role=None, is_superadmin: bool = False) -> User:
    user = User(
        firebase_uid=f"uid-{email}",
        email=email,
        full_name=email.split("@")[0],
        is_superadmin=is_superadmin,
    )
    db.add(user)
    db.flush()
    if role:
        db.add(UserTenant(user_id=user.id, tenant_id=tenant.id, role=role))
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def tenant(db):
    company = Company(name="Clínica Demo SA de CV", email="contacto@clinicademo.mx")
    db.add(company)
    db.flush()
    tenant = Tenant(
        company_id=company.id,
        name="Clínica Centro",
        subdomain="centro",
        timezone="Mexico/General",
        reservation_timeout_minutes=5,
        concurrent_capacity=1,
    )
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@pytest.fixture
def admin_user(db, tenant):
    return make_user(db, tenant, "admin@clinicademo.mx", role="admin")


@pytest.fixture
def staff_user(db, tenant):
    return make_user(db, tenant, "recepcion@clinicademo.mx", role="staff")


@pytest.fixture
def outsider(db, tenant):
    return make_user(db, tenant, "ajeno@otraclinica.mx")


@pytest.fixture
def login():
    def _login(user: User):
        _current["user_id"] = user.id

    yield _login
    _current["user_id"] = None


@pytest.fixture
def api(db, admin_user, login):
    """Test client signed in as the tenant admin"""
    app.dependency_overrides[get_current_user] = _override_current_user
    login(admin_user)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def booking_day(tenant) -> date:
    return next_open_day(today_in_timezone(tenant.timezone))


@pytest.fixture
def grooming_service(db, tenant):
    service = Service(
        tenant_id=tenant.id, name="Baño y Corte", type="grooming", duration_minutes=60, price=450.0
    )
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@pytest.fixture
def pet_owner(db, tenant):
    client = Client(
        tenant_id=tenant.id,
        name="Laura Garza",
        phone="8111111111",
        email="laura@example.com",
        fraccionamiento="Contry",
        latitude=25.631,
        longitude=-100.278,
    )
    client.pets.append(Pet(tenant_id=tenant.id, name="Canela", species="perro", breed="Poodle", size="chico"))
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


@pytest.fixture
def make_appointment(db, tenant, pet_owner):
    def _make(day: date, hhmm: str, duration: int = 60, status: str = "scheduled", **extra) -> Appointment:
        appointment = Appointment(
            tenant_id=tenant.id,
            client_id=pet_owner.id,
            pet_id=pet_owner.pets[0].id,
            type=extra.pop("type", "grooming"),
            status=status,
            scheduled_date=day,
            scheduled_time=hhmm,
            duration_minutes=duration,
            **extra,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make
