"""Demo data seeding"""

from vetgroom.domain.delivery.seed import seed_delivery_routes
from vetgroom.domain.delivery.service import DeliveryService
from vetgroom.domain.delivery.schemas import RouteOptimizationRequest
from vetgroom.models import Appointment, Client, Tenant
from vetgroom.seeds import seed_demo_data
from vetgroom.shared.timeutils import today_in_timezone


def test_demo_seed_is_keyed_by_subdomain(db):
    first = seed_demo_data(db, "demo")
    second = seed_demo_data(db, "demo")

    assert first.id == second.id
    assert db.query(Tenant).filter(Tenant.subdomain == "demo").count() == 1
    assert db.query(Client).filter(Client.tenant_id == first.id).count() == 4
    assert db.query(Appointment).filter(Appointment.tenant_id == first.id).count() == 4


def test_demo_tenant_supports_routes_and_optimization(db):
    tenant = seed_demo_data(db, "demo")

    result = seed_delivery_routes(db, tenant)
    assert result["created"] == 3

    plan = DeliveryService(db, tenant).optimize(
        RouteOptimizationRequest(date=today_in_timezone(tenant.timezone))
    )
    # Two completed demo appointments, both in colonias with known weights
    assert len(plan["points"]) == 2
    assert plan["fraccionamientoOrder"][0]["name"] == "Residencial Cumbres"
