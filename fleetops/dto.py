"""Transport views of persisted records.

Each mapper reads an ORM row into a plain dict, flattens decimals and dates
with :func:`strip_decimals_deep`, and then selects the fields of a stable
DTO. Field names are snake_case in Python and camelCase on the wire.
"""

from dataclasses import asdict
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from fleetops.db.models import Driver, Event, Order, Rate, Trip, Unit
from fleetops.serialize import strip_decimals_deep, to_iso, to_num
from fleetops.services.trips import TripTotals, as_utc


def camel_alias(name: str) -> str:
    """``fixed_cpm`` -> ``fixedCPM``, ``home_base`` -> ``homeBase``."""
    alias = to_camel(name)
    if alias.endswith("Cpm"):
        alias = alias[:-3] + "CPM"
    return alias


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=camel_alias, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class OrderDTO(CamelModel):
    id: str
    customer: str
    origin: str
    destination: str
    pu_window_start: str | None = None
    pu_window_end: str | None = None
    del_window_start: str | None = None
    del_window_end: str | None = None
    required_truck: str | None = None
    notes: str | None = None
    created_at: str | None = None


class RateDTO(CamelModel):
    id: str
    type: str | None = None
    zone: str | None = None
    fixed_cpm: float = 0
    wage_cpm: float = 0
    add_ons_cpm: float = 0
    rolling_cpm: float = 0


class UnitDTO(CamelModel):
    id: str
    code: str
    type: str | None = None
    home_base: str | None = None
    active: bool = True


class DriverDTO(CamelModel):
    id: str
    name: str
    home_base: str | None = None
    active: bool = True
    created_at: str | None = None
    updated_at: str | None = None


class TripDTO(CamelModel):
    id: str
    order_id: str | None = None
    driver_id: str | None = None
    unit_id: str | None = None
    rate_id: str | None = None
    driver: str | None = None
    unit: str | None = None
    type: str | None = None
    zone: str | None = None
    status: str
    trip_start: str | None = None
    trip_end: str | None = None
    week_start: str | None = None
    miles: float | None = None
    revenue: float | None = None
    fixed_cpm: float | None = None
    wage_cpm: float | None = None
    add_ons_cpm: float | None = None
    rolling_cpm: float | None = None
    total_cpm: float | None = None
    total_cost: float | None = None
    profit: float | None = None
    margin_pct: float | None = None
    created_at: str | None = None
    updated_at: str | None = None


class EventDTO(CamelModel):
    id: str
    trip_id: str
    type: str
    at: str | None = None
    location: str | None = None
    notes: str | None = None
    created_at: str | None = None
    trip: TripDTO | None = None


def row_to_dict(row: Any) -> dict[str, Any]:
    """Column values of an ORM row, in table column order.

    Naive datetimes (SQLite drops the offset) are read as UTC.
    """
    values = {}
    for column in row.__table__.columns:
        value = getattr(row, column.key)
        values[column.key] = as_utc(value) if isinstance(value, datetime) else value
    return values


def _plain(row: Any) -> dict[str, Any]:
    return strip_decimals_deep(row_to_dict(row))


def map_order_to_dto(order: Order) -> OrderDTO:
    plain = _plain(order)
    return OrderDTO(
        id=plain["id"],
        customer=plain["customer"],
        origin=plain["origin"],
        destination=plain["destination"],
        pu_window_start=to_iso(plain.get("pu_window_start")),
        pu_window_end=to_iso(plain.get("pu_window_end")),
        del_window_start=to_iso(plain.get("del_window_start")),
        del_window_end=to_iso(plain.get("del_window_end")),
        required_truck=plain.get("required_truck"),
        notes=plain.get("notes"),
        created_at=to_iso(plain.get("created_at")),
    )


def map_rate_to_dto(rate: Rate) -> RateDTO:
    """Rate view; missing per-mile components read as zero."""
    plain = _plain(rate)
    return RateDTO(
        id=plain["id"],
        type=plain.get("type"),
        zone=plain.get("zone"),
        fixed_cpm=to_num(plain.get("fixed_cpm")) or 0,
        wage_cpm=to_num(plain.get("wage_cpm")) or 0,
        add_ons_cpm=to_num(plain.get("add_ons_cpm")) or 0,
        rolling_cpm=to_num(plain.get("rolling_cpm")) or 0,
    )


def map_unit_to_dto(unit: Unit) -> UnitDTO:
    plain = _plain(unit)
    return UnitDTO(
        id=plain["id"],
        code=plain["code"],
        type=plain.get("type"),
        home_base=plain.get("home_base"),
        active=bool(plain.get("active", True)),
    )


def map_driver_to_dto(driver: Driver) -> DriverDTO:
    plain = _plain(driver)
    return DriverDTO(
        id=plain["id"],
        name=plain["name"],
        home_base=plain.get("home_base"),
        active=bool(plain.get("active", True)),
        created_at=to_iso(plain.get("created_at")),
        updated_at=to_iso(plain.get("updated_at")),
    )


_TRIP_NUMBERS = (
    "miles",
    "revenue",
    "fixed_cpm",
    "wage_cpm",
    "add_ons_cpm",
    "rolling_cpm",
    "total_cpm",
    "total_cost",
    "profit",
    "margin_pct",
)
_TRIP_DATES = ("trip_start", "trip_end", "week_start", "created_at", "updated_at")
_TRIP_TEXT = (
    "order_id",
    "driver_id",
    "unit_id",
    "rate_id",
    "driver",
    "unit",
    "type",
    "zone",
)


def map_trip_to_dto(trip: Trip) -> TripDTO:
    plain = _plain(trip)
    values: dict[str, Any] = {"id": plain["id"], "status": plain.get("status")}
    values.update({name: plain.get(name) for name in _TRIP_TEXT})
    values.update({name: to_num(plain.get(name)) for name in _TRIP_NUMBERS})
    values.update({name: to_iso(plain.get(name)) for name in _TRIP_DATES})
    return TripDTO(**values)


def map_event_to_dto(event: Event, include_trip: bool = False) -> EventDTO:
    plain = _plain(event)
    trip = None
    if include_trip and event.trip is not None:
        trip = map_trip_to_dto(event.trip)
    return EventDTO(
        id=plain["id"],
        trip_id=plain["trip_id"],
        type=plain["type"],
        at=to_iso(plain.get("at")),
        location=plain.get("location"),
        notes=plain.get("notes"),
        created_at=to_iso(plain.get("created_at")),
        trip=trip,
    )


class TimelineDTO(CamelModel):
    started_at: str | None = None
    arrived_pickup_at: str | None = None
    left_pickup_at: str | None = None
    crossed_border_at: str | None = None
    arrived_delivery_at: str | None = None
    finished_at: str | None = None
    elapsed_minutes: int | None = None
    pickup_dwell_minutes: int | None = None
    transit_minutes: int | None = None
    delivery_dwell_minutes: int | None = None
    event_count: int = 0
    ignored_events: int = 0


class TripTotalsDTO(CamelModel):
    trip_id: str
    miles: float | None = None
    revenue: float | None = None
    fixed_cpm: float | None = None
    wage_cpm: float | None = None
    add_ons_cpm: float | None = None
    rolling_cpm: float | None = None
    total_cpm: float | None = None
    total_cost: float | None = None
    profit: float | None = None
    margin_pct: float | None = None
    rate_id: str | None = None
    timeline: TimelineDTO


def map_totals_to_dto(totals: TripTotals) -> TripTotalsDTO:
    """Flatten a recalculation result, timeline included."""
    return TripTotalsDTO(**strip_decimals_deep(asdict(totals)))
