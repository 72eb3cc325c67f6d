"""Delivery routes, optimizer and demo seeding"""

import pytest

from vetgroom.domain.delivery.route_optimizer import (
    RoutePoint,
    haversine_km,
    optimize_delivery_route,
    solve_routes,
)
from vetgroom.models import Fraccionamiento, Staff
from vetgroom.shared.timeutils import today_in_timezone

CLINIC = (25.6866, -100.3161)


def _point(id, colonia, lat_offset=0.01, pets=1):
    return RoutePoint(
        id=id,
        latitude=CLINIC[0] + lat_offset,
        longitude=CLINIC[1],
        fraccionamiento=colonia,
        client_name=f"Cliente {id}",
        pet_name=f"Mascota {id}",
        pet_count=pets,
    )


@pytest.fixture
def driver(db, tenant):
    staff = Staff(tenant_id=tenant.id, name="Miguel Ángel", role="driver")
    db.add(staff)
    db.commit()
    db.refresh(staff)
    return staff


# ============================================================================
# OPTIMIZER
# ============================================================================


def test_haversine_one_degree_of_longitude_at_the_equator():
    assert haversine_km(0, 0, 0, 1) == pytest.approx(111.19, abs=0.01)
    assert haversine_km(25.0, -100.0, 25.0, -100.0) == 0


def test_full_van_starts_a_new_route():
    points = [_point(i, "Cumbres", lat_offset=0.001 * i) for i in range(1, 11)]

    routes, _ = solve_routes(CLINIC, points, {}, van_capacity="small")

    assert [len(r) for r in routes] == [8, 2]


def test_nearest_point_is_visited_first():
    points = [_point(1, "Cumbres", 0.05), _point(2, "Cumbres", 0.01), _point(3, "Cumbres", 0.03)]

    routes, _ = solve_routes(CLINIC, points, {})

    assert [p.id for p in routes[0]] == [2, 3, 1]


def test_lower_weight_colonias_go_first():
    points = [_point(1, "Mitras"), _point(2, "Contry"), _point(3, "Sin nombre")]

    result = optimize_delivery_route(CLINIC, points, {"Contry": 1.0, "Mitras": 9.0})

    assert result["routes"] == [[2], [3], [1]]
    assert [c["name"] for c in result["fraccionamientoOrder"]] == ["Contry", "Sin nombre", "Mitras"]
    assert result["fraccionamientoOrder"][1]["weight"] == 5.0


def test_stop_at_the_clinic_only_costs_service_time():
    result = optimize_delivery_route(CLINIC, [_point(1, None, lat_offset=0)], {})

    assert result["totalDistance"] == 0
    assert result["estimatedTime"] == 5
    assert result["efficiency"] == 1
    assert result["routeSequence"] == ["Cliente 1 - Mascota 1 (unknown)"]


def test_no_points_gives_empty_plan():
    result = optimize_delivery_route(CLINIC, [], {})

    assert result["routes"] == []
    assert result["efficiency"] == 0


# ============================================================================
# HTTP
# ============================================================================


def test_optimize_uses_completed_appointments_with_coordinates(
    api, db, tenant, booking_day, make_appointment
):
    db.add(Fraccionamiento(tenant_id=tenant.id, name="Contry", weight=2.0))
    db.commit()
    done = make_appointment(booking_day, "10:00", 60, status="completed")
    make_appointment(booking_day, "12:00", 60, status="scheduled")

    response = api.post(
        f"/tenants/{tenant.id}/delivery-routes/optimize",
        json={"date": booking_day.isoformat(), "van_capacity": "small"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["routes"] == [[done.id]]
    assert body["routeSequence"] == ["Laura Garza - Canela (Contry)"]
    assert body["fraccionamientoOrder"] == [{"name": "Contry", "weight": 2.0, "stopCount": 1}]
    assert body["totalDistance"] > 0


def test_optimize_rejects_unknown_van(api, tenant, booking_day):
    response = api.post(
        f"/tenants/{tenant.id}/delivery-routes/optimize",
        json={"date": booking_day.isoformat(), "van_capacity": "bus"},
    )
    assert response.status_code == 422


def test_seed_needs_staff(api, tenant, pet_owner):
    response = api.post(f"/tenants/{tenant.id}/delivery-routes/seed")

    assert response.json()["skipped"] is True
    assert response.json()["created"] == 0


def test_seed_is_idempotent(api, tenant, pet_owner, driver):
    first = api.post(f"/tenants/{tenant.id}/delivery-routes/seed").json()
    second = api.post(f"/tenants/{tenant.id}/delivery-routes/seed").json()

    assert first["created"] == 3
    assert len(first["routeIds"]) == 3
    assert second == {"created": 0, "skipped": True, "reason": "Tenant already has delivery routes"}

    routes = api.get(f"/tenants/{tenant.id}/delivery-routes").json()
    assert len(routes) == 3
    morning = next(r for r in routes if r["name"] == "Ruta Norte - Mañana")
    assert morning["status"] == "in_progress"
    assert morning["actualDuration"] == 40
    assert morning["actualStartTime"].startswith(f"{today_in_timezone(tenant.timezone).isoformat()}T15:00")
    assert morning["stops"][0]["actualArrivalTime"].endswith("T15:05:00")
    assert morning["stops"][0]["status"] == "completed"
    assert morning["driverName"] == "Miguel Ángel"


def test_route_status_transitions(api, tenant, booking_day, pet_owner, driver):
    base = f"/tenants/{tenant.id}/delivery-routes"
    route = api.post(
        base,
        json={
            "name": "Ruta Poniente",
            "scheduledDate": booking_day.isoformat(),
            "driverId": driver.id,
            "stops": [{"clientId": pet_owner.id, "estimatedTime": "09:30", "services": ["Baño"]}],
        },
    ).json()
    assert route["status"] == "planned"
    assert route["stops"][0]["stopOrder"] == 1

    started = api.patch(f"{base}/{route['id']}/status", json={"status": "in_progress"})
    assert started.status_code == 200
    assert started.json()["actualStartTime"] is not None

    assert api.patch(f"{base}/{route['id']}/status", json={"status": "planned"}).status_code == 400
    assert api.patch(f"{base}/{route['id']}/status", json={"status": "lost"}).status_code == 422

    finished = api.patch(f"{base}/{route['id']}/status", json={"status": "completed"}).json()
    assert finished["actualEndTime"] is not None
    assert finished["actualDuration"] == 0


def test_route_with_foreign_driver_is_rejected(api, tenant, booking_day):
    response = api.post(
        f"/tenants/{tenant.id}/delivery-routes",
        json={"name": "Ruta X", "scheduledDate": booking_day.isoformat(), "driverId": 999},
    )
    assert response.status_code == 404


def test_stop_progress_records_times(api, tenant, booking_day, pet_owner, staff_user, login):
    base = f"/tenants/{tenant.id}/delivery-routes"
    route = api.post(
        base,
        json={"name": "Ruta Sur", "scheduledDate": booking_day.isoformat(), "stops": [{"clientId": pet_owner.id}]},
    ).json()
    stop_id = route["stops"][0]["id"]

    login(staff_user)
    arrived = api.patch(f"{base}/stops/{stop_id}", json={"status": "in_progress"}).json()
    done = api.patch(f"{base}/stops/{stop_id}", json={"status": "completed", "notes": "Entregado"}).json()

    assert arrived["actualArrivalTime"] is not None
    assert done["actualCompletionTime"] is not None
    assert done["notes"] == "Entregado"
    assert done["clientName"] == "Laura Garza"
    assert api.patch(f"{base}/stops/{stop_id}", json={"status": "lost"}).status_code == 422
