"""Delivery route repository"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, Client, DeliveryRoute, DeliveryStop


class DeliveryRepository:
    @staticmethod
    def get_routes(
        db: Session,
        tenant_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[DeliveryRoute]:
        query = (
            db.query(DeliveryRoute)
            .options(joinedload(DeliveryRoute.stops), joinedload(DeliveryRoute.driver))
            .filter(DeliveryRoute.tenant_id == tenant_id)
        )
        if start_date:
            query = query.filter(DeliveryRoute.scheduled_date >= start_date)
        if end_date:
            query = query.filter(DeliveryRoute.scheduled_date <= end_date)
        return query.order_by(DeliveryRoute.scheduled_date, DeliveryRoute.id).all()

    @staticmethod
    def get_route(db: Session, route_id: int, tenant_id: int) -> Optional[DeliveryRoute]:
        return (
            db.query(DeliveryRoute)
            .filter(DeliveryRoute.id == route_id, DeliveryRoute.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def count_routes(db: Session, tenant_id: int) -> int:
        return db.query(DeliveryRoute).filter(DeliveryRoute.tenant_id == tenant_id).count()

    @staticmethod
    def get_stop(db: Session, stop_id: int, tenant_id: int) -> Optional[DeliveryStop]:
        return (
            db.query(DeliveryStop)
            .join(DeliveryRoute, DeliveryStop.route_id == DeliveryRoute.id)
            .filter(DeliveryStop.id == stop_id, DeliveryRoute.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def add_route(db: Session, tenant_id: int, stops: list[dict], **data) -> DeliveryRoute:
        route = DeliveryRoute(tenant_id=tenant_id, **data)
        route.stops = [DeliveryStop(**stop) for stop in stops]
        db.add(route)
        db.flush()
        return route

    @staticmethod
    def get_completed_appointments_with_location(
        db: Session, tenant_id: int, day: date
    ) -> list[Appointment]:
        return (
            db.query(Appointment)
            .join(Client, Appointment.client_id == Client.id)
            .options(joinedload(Appointment.client), joinedload(Appointment.pet))
            .filter(
                Appointment.tenant_id == tenant_id,
                Appointment.scheduled_date == day,
                Appointment.status == "completed",
                Client.latitude.isnot(None),
                Client.longitude.isnot(None),
            )
            .order_by(Appointment.scheduled_time)
            .all()
        )
