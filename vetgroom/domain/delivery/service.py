"""Delivery service - routes, stop progress and route optimization"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Client, DeliveryRoute, DeliveryStop, Staff, Tenant
from ...shared.timeutils import utcnow
from ...utils.sanitization import clean_text
from ..colonias.repository import ColoniaRepository
from .repository import DeliveryRepository
from .route_optimizer import MONTERREY_CENTER, RoutePoint, optimize_delivery_route
from .schemas import DeliveryRouteCreate, DeliveryStopUpdate, RouteOptimizationRequest

logger = logging.getLogger(__name__)

ROUTE_TRANSITIONS = {
    "planned": ("in_progress", "completed"),
    "in_progress": ("completed",),
    "completed": (),
}


def clinic_location(tenant: Tenant) -> tuple[float, float]:
    location = (tenant.settings or {}).get("clinic_location") or {}
    if location.get("lat") is not None and location.get("lng") is not None:
        return float(location["lat"]), float(location["lng"])
    return MONTERREY_CENTER


class DeliveryService:
    def __init__(self, db: Session, tenant: Tenant):
        self.db = db
        self.tenant = tenant
        self.repo = DeliveryRepository()

    def list_routes(self, start_date: Optional[date] = None, end_date: Optional[date] = None):
        return self.repo.get_routes(self.db, self.tenant.id, start_date, end_date)

    def get_route(self, route_id: int) -> DeliveryRoute:
        route = self.repo.get_route(self.db, route_id, self.tenant.id)
        if not route:
            raise HTTPException(status_code=404, detail="Ruta no encontrada")
        return route

    def create_route(self, data: DeliveryRouteCreate) -> DeliveryRoute:
        if data.driverId is not None and not (
            self.db.query(Staff)
            .filter(Staff.id == data.driverId, Staff.tenant_id == self.tenant.id)
            .first()
        ):
            raise HTTPException(status_code=404, detail="Conductor no encontrado")

        client_ids = {s.clientId for s in data.stops if s.clientId is not None}
        if client_ids:
            found = (
                self.db.query(Client.id)
                .filter(Client.id.in_(client_ids), Client.tenant_id == self.tenant.id)
                .count()
            )
            if found != len(client_ids):
                raise HTTPException(status_code=404, detail="Cliente no encontrado")

        stops = [
            {
                "client_id": s.clientId,
                "fraccionamiento_id": s.fraccionamientoId,
                "appointment_id": s.appointmentId,
                "stop_order": s.stopOrder or index,
                "address": clean_text(s.address),
                "estimated_time": s.estimatedTime,
                "services": s.services,
                "estimated_weight": s.estimatedWeight,
                "notes": clean_text(s.notes, 1000),
            }
            for index, s in enumerate(data.stops, start=1)
        ]
        route = self.repo.add_route(
            self.db,
            self.tenant.id,
            stops,
            name=clean_text(data.name, 255),
            scheduled_date=data.scheduledDate,
            driver_id=data.driverId,
            status="planned",
            total_weight=data.totalWeight,
            estimated_duration=data.estimatedDuration,
        )
        self.db.commit()
        self.db.refresh(route)
        logger.info(f"🚐 Route '{route.name}' created with {len(stops)} stops (tenant {self.tenant.id})")
        return route

    def update_route_status(self, route_id: int, status: str) -> DeliveryRoute:
        route = self.get_route(route_id)
        if status == route.status:
            return route
        if status not in ROUTE_TRANSITIONS[route.status]:
            raise HTTPException(
                status_code=400, detail=f"No se puede cambiar la ruta de {route.status} a {status}"
            )

        now = utcnow()
        if status == "in_progress":
            route.actual_start_time = now
        elif status == "completed":
            route.actual_end_time = now
            if route.actual_start_time:
                route.actual_duration = round((now - route.actual_start_time).total_seconds() / 60)
        route.status = status
        self.db.commit()
        self.db.refresh(route)
        logger.info(f"🔄 Route {route.id} -> {status}")
        return route

    def update_stop(self, stop_id: int, data: DeliveryStopUpdate) -> DeliveryStop:
        stop = self.repo.get_stop(self.db, stop_id, self.tenant.id)
        if not stop:
            raise HTTPException(status_code=404, detail="Parada no encontrada")

        now = utcnow()
        if data.status:
            stop.status = data.status
            if data.status == "in_progress" and not stop.actual_arrival_time:
                stop.actual_arrival_time = now
            if data.status == "completed" and not stop.actual_completion_time:
                stop.actual_completion_time = now
        if data.actualArrivalTime:
            stop.actual_arrival_time = data.actualArrivalTime.replace(tzinfo=None)
        if data.actualCompletionTime:
            stop.actual_completion_time = data.actualCompletionTime.replace(tzinfo=None)
        if data.notes is not None:
            stop.notes = clean_text(data.notes, 1000)
        self.db.commit()
        self.db.refresh(stop)
        return stop

    def optimize(self, data: RouteOptimizationRequest) -> dict:
        if data.clinic_location:
            clinic = (data.clinic_location.lat, data.clinic_location.lng)
        else:
            clinic = clinic_location(self.tenant)

        appointments = self.repo.get_completed_appointments_with_location(self.db, self.tenant.id, data.date)
        points = [
            RoutePoint(
                id=a.id,
                latitude=a.client.latitude,
                longitude=a.client.longitude,
                address=a.client.address,
                fraccionamiento=a.client.fraccionamiento,
                client_name=a.client.name,
                pet_name=a.pet.name if a.pet else None,
            )
            for a in appointments
        ]
        weights = ColoniaRepository.get_weights(self.db, self.tenant.id)
        result = optimize_delivery_route(clinic, points, weights, data.van_capacity)
        logger.info(
            f"🗺️ Optimized {len(points)} deliveries into {len(result['routes'])} routes "
            f"({result['totalDistance']} km) for tenant {self.tenant.id}"
        )
        return result
