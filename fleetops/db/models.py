"""ORM models for orders, rates, rosters, trips, and trip events."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# Per-mile components carry four places; money carries cents.
CPM = Numeric(10, 4)
MONEY = Numeric(12, 2)


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_new_id)
    customer = Column(String(255), nullable=False)
    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    pu_window_start = Column(DateTime(timezone=True), nullable=True)
    pu_window_end = Column(DateTime(timezone=True), nullable=True)
    del_window_start = Column(DateTime(timezone=True), nullable=True)
    del_window_end = Column(DateTime(timezone=True), nullable=True)
    required_truck = Column(String(120), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    trips = relationship("Trip", back_populates="order")

    def __repr__(self):
        return f"<Order(id={self.id}, customer='{self.customer}')>"


class Rate(Base):
    __tablename__ = "rates"

    id = Column(String(36), primary_key=True, default=_new_id)
    type = Column(String(80), nullable=True)
    zone = Column(String(80), nullable=True)
    fixed_cpm = Column(CPM, nullable=False, default=0)
    wage_cpm = Column(CPM, nullable=False, default=0)
    add_ons_cpm = Column(CPM, nullable=False, default=0)
    rolling_cpm = Column(CPM, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Rate(id={self.id}, type='{self.type}', zone='{self.zone}')>"


class Unit(Base):
    __tablename__ = "units"

    id = Column(String(36), primary_key=True, default=_new_id)
    code = Column(String(60), nullable=False, unique=True)
    type = Column(String(80), nullable=True)
    home_base = Column(String(120), nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<Unit(id={self.id}, code='{self.code}')>"


class Driver(Base):
    __tablename__ = "drivers"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(120), nullable=False, unique=True)
    home_base = Column(String(120), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self):
        return f"<Driver(id={self.id}, name='{self.name}')>"


class Trip(Base):
    __tablename__ = "trips"

    id = Column(String(36), primary_key=True, default=_new_id)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=True)
    driver = Column(String(120), nullable=False)
    driver_id = Column(String(36), ForeignKey("drivers.id"), nullable=True)
    unit = Column(String(60), nullable=False)
    unit_id = Column(String(36), ForeignKey("units.id"), nullable=True)
    rate_id = Column(String(36), ForeignKey("rates.id"), nullable=True)
    type = Column(String(80), nullable=True)
    zone = Column(String(80), nullable=True)
    status = Column(String(40), nullable=False, default="Created")

    trip_start = Column(DateTime(timezone=True), nullable=True)
    trip_end = Column(DateTime(timezone=True), nullable=True)
    week_start = Column(DateTime(timezone=True), nullable=True)

    miles = Column(Numeric(10, 2), nullable=False, default=0)
    revenue = Column(MONEY, nullable=True)
    fixed_cpm = Column(CPM, nullable=True)
    wage_cpm = Column(CPM, nullable=True)
    add_ons_cpm = Column(CPM, nullable=True)
    rolling_cpm = Column(CPM, nullable=True)
    total_cpm = Column(CPM, nullable=True)
    total_cost = Column(MONEY, nullable=True)
    profit = Column(MONEY, nullable=True)
    margin_pct = Column(Numeric(12, 6), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    order = relationship("Order", back_populates="trips")
    driver_ref = relationship("Driver")
    unit_ref = relationship("Unit")
    rate_ref = relationship("Rate")
    events = relationship(
        "Event", back_populates="trip", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Trip(id={self.id}, driver='{self.driver}', status='{self.status}')>"


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=_new_id)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    type = Column(String(60), nullable=False)
    at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    location = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    trip = relationship("Trip", back_populates="events")

    def __repr__(self):
        return f"<Event(id={self.id}, trip_id={self.trip_id}, type='{self.type}')>"
