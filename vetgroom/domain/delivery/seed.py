"""Sample delivery routes for demo tenants"""

import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from ...models import Client, Staff, Tenant
from ...shared.timeutils import local_datetime_to_utc, today_in_timezone
from .repository import DeliveryRepository

logger = logging.getLogger(__name__)

STOP_SERVICES = [
    ["Consulta Veterinaria", "Vacunación"],
    ["Grooming", "Baño medicado"],
    ["Entrega de medicamentos", "Seguimiento"],
]


def seed_delivery_routes(db: Session, tenant: Tenant) -> dict:
    """Idempotent: does nothing when the tenant already has routes"""
    repo = DeliveryRepository()
    if repo.count_routes(db, tenant.id):
        logger.info(f"⏭️ Tenant {tenant.id} already has delivery routes, skipping seed")
        return {"created": 0, "skipped": True, "reason": "Tenant already has delivery routes"}

    clients = db.query(Client).filter(Client.tenant_id == tenant.id).order_by(Client.id).limit(10).all()
    staff = (
        db.query(Staff)
        .filter(Staff.tenant_id == tenant.id, Staff.is_active.is_(True))
        .order_by(Staff.id)
        .limit(5)
        .all()
    )
    if not clients or not staff:
        logger.warning(f"⚠️ No clients or staff for tenant {tenant.id}, skipping route seeding")
        return {"created": 0, "skipped": True, "reason": "Tenant needs clients and staff first"}

    today = today_in_timezone(tenant.timezone)
    tomorrow = today + timedelta(days=1)
    second_driver = staff[1] if len(staff) > 1 else staff[0]
    first_arrival = local_datetime_to_utc(today, "09:05", tenant.timezone)
    first_completion = local_datetime_to_utc(today, "09:45", tenant.timezone)

    plans = [
        {
            "name": "Ruta Norte - Mañana",
            "scheduled_date": today,
            "driver_id": staff[0].id,
            "status": "in_progress",
            "estimated_duration": 180,
            "actual_start_time": local_datetime_to_utc(today, "09:00", tenant.timezone),
        },
        {
            "name": "Ruta Centro - Tarde",
            "scheduled_date": today,
            "driver_id": second_driver.id,
            "status": "planned",
            "estimated_duration": 120,
        },
        {
            "name": "Ruta Sur - Mañana",
            "scheduled_date": tomorrow,
            "driver_id": staff[0].id,
            "status": "planned",
            "estimated_duration": 150,
        },
    ]

    routes = []
    for route_index, plan in enumerate(plans):
        stops = []
        for index, client in enumerate(clients[: 3 + route_index]):
            first_route = route_index == 0
            if first_route and index == 0:
                status = "completed"
            elif first_route and index == 1:
                status = "in_progress"
            else:
                status = "pending"
            stops.append(
                {
                    "client_id": client.id,
                    "address": client.address or f"{client.fraccionamiento or 'Centro'}, Dirección {index + 1}",
                    "estimated_time": f"{9 + index:02d}:{'00' if index == 0 else '30'}",
                    "status": status,
                    "stop_order": index + 1,
                    "services": STOP_SERVICES[min(index, 2)],
                    "actual_arrival_time": first_arrival if status == "completed" else None,
                    "actual_completion_time": first_completion if status == "completed" else None,
                }
            )
        routes.append(repo.add_route(db, tenant.id, stops, **plan))

    first = routes[0]
    arrivals = [s.actual_arrival_time for s in first.stops if s.actual_arrival_time]
    completions = [s.actual_completion_time for s in first.stops if s.actual_completion_time]
    if arrivals and completions:
        first.actual_duration = round((max(completions) - min(arrivals)).total_seconds() / 60)

    db.commit()
    logger.info(f"✅ Seeded {len(routes)} delivery routes for tenant {tenant.id}")
    return {"created": len(routes), "skipped": False, "routeIds": [r.id for r in routes]}
