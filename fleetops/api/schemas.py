"""Pydantic request schemas for the FastAPI endpoints.

Bodies use camelCase on the wire (``homeBase``, ``fixedCPM``); snake_case
names are accepted too.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import (
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from fleetops.dto import CamelModel
from fleetops.parsing.fields import MAX_NOTES_LENGTH
from fleetops.services.trips import TripStatus, as_utc


class RequestModel(CamelModel):
    """Blank optional strings read as ``None``; datetimes are stored in UTC."""

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("*", mode="before")
    @classmethod
    def _blank_optional_is_none(cls, value, info: ValidationInfo):
        if isinstance(value, str) and not value.strip():
            if not cls.model_fields[info.field_name].is_required():
                return None
        return value

    @field_validator("*")
    @classmethod
    def _datetimes_in_utc(cls, value):
        if isinstance(value, datetime):
            return as_utc(value)
        return value


class DriverIn(RequestModel):
    """Create or replace a driver."""

    name: str = Field(min_length=1, max_length=120)
    home_base: str | None = Field(default=None, max_length=120)
    active: bool = True


class UnitIn(RequestModel):
    """Create or replace a unit (tractor or truck)."""

    code: str = Field(min_length=1, max_length=60)
    type: str | None = Field(default=None, max_length=80)
    home_base: str | None = Field(default=None, max_length=120)
    active: bool = True


class OrderIn(RequestModel):
    """A confirmed order, typically a reviewed OCR draft."""

    customer: str = Field(min_length=1, max_length=255)
    origin: str = Field(min_length=1, max_length=255)
    destination: str = Field(min_length=1, max_length=255)
    pu_window_start: datetime | None = None
    pu_window_end: datetime | None = None
    del_window_start: datetime | None = None
    del_window_end: datetime | None = None
    required_truck: str | None = Field(default=None, max_length=120)
    notes: str | None = Field(default=None, max_length=MAX_NOTES_LENGTH)

    @model_validator(mode="after")
    def _windows_in_order(self) -> "OrderIn":
        for name in ("pu", "del"):
            start = getattr(self, f"{name}_window_start")
            end = getattr(self, f"{name}_window_end")
            if start and end and end < start:
                raise ValueError(
                    f"{name}WindowEnd must not be before {name}WindowStart"
                )
        return self


class RateIn(RequestModel):
    """Per-mile rate for a truck type and zone; either may be omitted."""

    type: str | None = Field(default=None, max_length=80)
    zone: str | None = Field(default=None, max_length=80)
    fixed_cpm: Decimal = Field(default=Decimal(0), ge=0)
    wage_cpm: Decimal = Field(default=Decimal(0), ge=0)
    add_ons_cpm: Decimal = Field(default=Decimal(0), ge=0)
    rolling_cpm: Decimal = Field(default=Decimal(0), ge=0)


class TripIn(RequestModel):
    """Book a trip. Missing CPM components are left for recalculation."""

    order_id: str | None = None
    driver: str = Field(min_length=1, max_length=120)
    driver_id: str | None = None
    unit: str = Field(min_length=1, max_length=60)
    unit_id: str | None = None
    rate_id: str | None = None
    type: str | None = Field(default=None, max_length=80)
    zone: str | None = Field(default=None, max_length=80)
    status: TripStatus = TripStatus.DISPATCHED
    trip_start: datetime | None = None
    trip_end: datetime | None = None
    miles: Decimal = Field(ge=0)
    revenue: Decimal | None = None
    fixed_cpm: Decimal | None = Field(default=None, ge=0)
    wage_cpm: Decimal | None = Field(default=None, ge=0)
    add_ons_cpm: Decimal | None = Field(default=None, ge=0)
    rolling_cpm: Decimal | None = Field(default=None, ge=0)


class TripStatusIn(RequestModel):
    status: TripStatus


class EventIn(RequestModel):
    """A trip lifecycle event. ``at`` defaults to the time of the request."""

    trip_id: str = Field(min_length=1)
    type: str = Field(min_length=1, max_length=60)
    at: datetime | None = None
    location: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None, max_length=MAX_NOTES_LENGTH)
