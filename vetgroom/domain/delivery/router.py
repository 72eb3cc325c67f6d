"""Delivery router - routes, stops, optimization and demo seeding"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import TenantAccess, get_tenant_access, require_tenant_admin
from ...database import get_db
from ...models import DeliveryRoute, DeliveryStop
from .schemas import (
    DeliveryRouteCreate,
    DeliveryRouteResponse,
    DeliveryStopResponse,
    DeliveryStopUpdate,
    RouteOptimizationRequest,
    RouteStatusUpdate,
)
from .seed import seed_delivery_routes
from .service import DeliveryService

router = APIRouter(prefix="/tenants/{tenant_id}/delivery-routes", tags=["Delivery"])


def _stop_response(stop: DeliveryStop) -> DeliveryStopResponse:
    return DeliveryStopResponse(
        id=stop.id,
        clientId=stop.client_id,
        clientName=stop.client.name if stop.client else None,
        fraccionamientoId=stop.fraccionamiento_id,
        appointmentId=stop.appointment_id,
        stopOrder=stop.stop_order,
        address=stop.address,
        estimatedTime=stop.estimated_time,
        status=stop.status,
        services=stop.services,
        estimatedWeight=stop.estimated_weight,
        actualArrivalTime=stop.actual_arrival_time,
        actualCompletionTime=stop.actual_completion_time,
        notes=stop.notes,
    )


def _route_response(route: DeliveryRoute) -> DeliveryRouteResponse:
    return DeliveryRouteResponse(
        id=route.id,
        name=route.name,
        scheduledDate=route.scheduled_date,
        driverId=route.driver_id,
        driverName=route.driver.name if route.driver else None,
        status=route.status,
        totalWeight=route.total_weight,
        estimatedDuration=route.estimated_duration,
        actualDuration=route.actual_duration,
        actualStartTime=route.actual_start_time,
        actualEndTime=route.actual_end_time,
        stops=[_stop_response(s) for s in sorted(route.stops, key=lambda s: s.stop_order)],
    )


@router.get("", response_model=list[DeliveryRouteResponse])
async def list_routes(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    routes = DeliveryService(db, access.tenant).list_routes(start_date, end_date)
    return [_route_response(r) for r in routes]


@router.post("", response_model=DeliveryRouteResponse, status_code=201)
async def create_route(
    data: DeliveryRouteCreate,
    access: TenantAccess = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
):
    return _route_response(DeliveryService(db, access.tenant).create_route(data))


@router.post("/optimize")
async def optimize_routes(
    data: RouteOptimizationRequest,
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return DeliveryService(db, access.tenant).optimize(data)


@router.post("/seed")
async def seed_routes(
    access: TenantAccess = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
):
    return seed_delivery_routes(db, access.tenant)


@router.patch("/stops/{stop_id}", response_model=DeliveryStopResponse)
async def update_stop(
    stop_id: int,
    data: DeliveryStopUpdate,
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return _stop_response(DeliveryService(db, access.tenant).update_stop(stop_id, data))


@router.get("/{route_id}", response_model=DeliveryRouteResponse)
async def get_route(
    route_id: int,
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return _route_response(DeliveryService(db, access.tenant).get_route(route_id))


@router.patch("/{route_id}/status", response_model=DeliveryRouteResponse)
async def update_route_status(
    route_id: int,
    data: RouteStatusUpdate,
    access: TenantAccess = Depends(get_tenant_access),
    db: Session = Depends(get_db),
):
    return _route_response(DeliveryService(db, access.tenant).update_route_status(route_id, data.status))
