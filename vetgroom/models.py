from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

APPOINTMENT_STATUSES = ("scheduled", "confirmed", "in_progress", "completed", "cancelled", "rescheduled")
SERVICE_TYPES = ("medical", "grooming", "vaccination")
STAFF_ROLES = ("veterinarian", "groomer", "technician", "receptionist", "driver")
TENANT_ROLES = ("staff", "admin", "owner")
INVENTORY_CATEGORIES = ("medication", "supplies", "food", "accessories")
ROUTE_STATUSES = ("planned", "in_progress", "completed")
STOP_STATUSES = ("pending", "in_progress", "completed", "failed")


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    follow_up_config = Column(JSON, nullable=True)  # e.g., {"enabled": true, "days_after": 7}
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    tenants = relationship("Tenant", back_populates="company")


class Tenant(Base):
    """A single clinic/site. Every operational row is scoped by tenant_id."""

    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    subdomain = Column(String(100), unique=True, index=True, nullable=False)
    address = Column(Text, nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    timezone = Column(String(100), nullable=False, default="Mexico/General")
    reservation_timeout_minutes = Column(Integer, nullable=False, default=5)
    concurrent_capacity = Column(Integer, nullable=False, default=1)  # Simultaneous appointments
    settings = Column(JSON, nullable=True)  # e.g., {"clinic_location": {"lat": .., "lng": ..}}
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    company = relationship("Company", back_populates="tenants")
    memberships = relationship("UserTenant", back_populates="tenant", cascade="all, delete-orphan")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    firebase_uid = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    is_superadmin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    memberships = relationship("UserTenant", back_populates="user", cascade="all, delete-orphan")


class UserTenant(Base):
    __tablename__ = "user_tenants"
    __table_args__ = (UniqueConstraint("user_id", "tenant_id", name="uq_user_tenant"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="staff")  # staff, admin, owner
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="memberships")
    tenant = relationship("Tenant", back_populates="memberships")


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False)  # medical, grooming, vaccination
    capacity = Column(Integer, default=1, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    equipment = Column(JSON, nullable=True)  # e.g., ["mesa", "secadora"]
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Staff(Base):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    name = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False)  # veterinarian, groomer, technician, receptionist, driver
    specialization = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False)  # medical, grooming, vaccination
    duration_minutes = Column(Integer, default=60, nullable=False)
    price = Column(Float, default=0.0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True, index=True)  # 10 digits, no country code
    email = Column(String(255), nullable=True, index=True)
    address = Column(Text, nullable=True)
    fraccionamiento = Column(String(255), nullable=True)  # Colonia name
    postal_code = Column(String(10), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    pets = relationship("Pet", back_populates="client", cascade="all, delete-orphan")
    appointments = relationship("Appointment", back_populates="client")


class Pet(Base):
    __tablename__ = "pets"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    species = Column(String(50), nullable=True)  # perro, gato, ...
    breed = Column(String(100), nullable=True)
    size = Column(String(20), nullable=True)  # chico, mediano, grande
    age = Column(Integer, nullable=True)
    weight = Column(Float, nullable=True)  # kg
    medical_history = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    client = relationship("Client", back_populates="pets")


class Appointment(Base):
    """Appointments are stored in clinic-local date/time (see Tenant.timezone)."""

    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    pet_id = Column(Integer, ForeignKey("pets.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=True)
    type = Column(String(50), nullable=False, default="grooming")  # grooming, medical, hybrid, ...
    status = Column(String(50), nullable=False, default="scheduled", index=True)
    scheduled_date = Column(Date, nullable=False, index=True)
    scheduled_time = Column(String(5), nullable=False)  # HH:MM
    duration_minutes = Column(Integer, nullable=False, default=60)
    collection_type = Column(String(20), nullable=True)  # pickup, dropoff
    notes = Column(Text, nullable=True)
    services = Column(JSON, nullable=True)  # e.g., ["Baño", "Corte"]
    total_cost = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    client = relationship("Client", back_populates="appointments")
    pet = relationship("Pet")
    service = relationship("Service")
    room = relationship("Room")
    staff = relationship("Staff")


class BusinessHours(Base):
    __tablename__ = "business_hours"
    __table_args__ = (UniqueConstraint("tenant_id", "day_of_week", name="uq_business_hours_day"),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0=Monday ... 6=Sunday
    open_time = Column(String(5), nullable=False, default="09:00")
    close_time = Column(String(5), nullable=False, default="17:00")
    is_closed = Column(Boolean, default=False, nullable=False)


class AppointmentTypeConfig(Base):
    __tablename__ = "appointment_type_configs"
    __table_args__ = (
        UniqueConstraint("tenant_id", "appointment_type", name="uq_appointment_type_config"),
    )

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    appointment_type = Column(String(50), nullable=False)
    default_duration_minutes = Column(Integer, nullable=False, default=60)
    slot_interval_minutes = Column(Integer, nullable=False, default=30)


class SlotReservation(Base):
    """Short-lived hold on a slot while a booking session fills the intake form."""

    __tablename__ = "slot_reservations"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    session_id = Column(String(255), nullable=False, index=True)
    scheduled_date = Column(Date, nullable=False, index=True)
    scheduled_time = Column(String(5), nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=60)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=True)
    expires_at = Column(DateTime, nullable=False, index=True)  # Naive UTC
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Fraccionamiento(Base):
    __tablename__ = "fraccionamientos"
    __table_args__ = (UniqueConstraint("tenant_id", "name", name="uq_fraccionamiento_name"),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    postal_code = Column(String(10), nullable=True, index=True)
    zone = Column(String(100), nullable=True)
    weight = Column(Float, nullable=False, default=5.0)  # Lower weight = higher delivery priority
    max_weight_capacity = Column(Float, nullable=True)
    delivery_days = Column(JSON, nullable=True)  # e.g., ["monday", "thursday"]
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, default="supplies")
    sku = Column(String(100), nullable=True, index=True)
    unit_price = Column(Float, nullable=False, default=0.0)
    current_stock = Column(Integer, nullable=False, default=0)
    min_stock_level = Column(Integer, nullable=False, default=1)
    max_stock_level = Column(Integer, nullable=False, default=10)
    unit = Column(String(50), nullable=False, default="pieza")
    supplier = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    transactions = relationship(
        "InventoryTransaction", back_populates="item", cascade="all, delete-orphan"
    )


class InventoryTransaction(Base):
    __tablename__ = "inventory_transactions"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # purchase, sale, adjustment
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False, default=0.0)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    item = relationship("InventoryItem", back_populates="transactions")


class ReceiptTemplate(Base):
    """Receipt layout. tenant_id NULL means shared by every tenant of the company."""

    __tablename__ = "receipt_templates"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    template_type = Column(String(50), nullable=False, default="receipt")
    is_active = Column(Boolean, default=True, nullable=False)
    version = Column(Integer, default=1, nullable=False)
    config = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class DeliveryRoute(Base):
    __tablename__ = "delivery_routes"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    scheduled_date = Column(Date, nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey("staff.id"), nullable=True)
    status = Column(String(20), nullable=False, default="planned")
    total_weight = Column(Float, nullable=True)
    estimated_duration = Column(Integer, nullable=True)  # minutes
    actual_duration = Column(Integer, nullable=True)  # minutes
    actual_start_time = Column(DateTime, nullable=True)
    actual_end_time = Column(DateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    driver = relationship("Staff")
    stops = relationship(
        "DeliveryStop",
        back_populates="route",
        cascade="all, delete-orphan",
        order_by="DeliveryStop.stop_order",
    )


class DeliveryStop(Base):
    __tablename__ = "delivery_stops"

    id = Column(Integer, primary_key=True, index=True)
    route_id = Column(Integer, ForeignKey("delivery_routes.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True)
    fraccionamiento_id = Column(Integer, ForeignKey("fraccionamientos.id"), nullable=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=True)
    stop_order = Column(Integer, nullable=False)
    address = Column(Text, nullable=True)
    estimated_time = Column(String(5), nullable=True)  # HH:MM
    status = Column(String(20), nullable=False, default="pending")
    services = Column(JSON, nullable=True)
    estimated_weight = Column(Float, nullable=True)
    actual_arrival_time = Column(DateTime, nullable=True)
    actual_completion_time = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    route = relationship("DeliveryRoute", back_populates="stops")
    client = relationship("Client")
