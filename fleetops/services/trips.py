"""Trip totals recalculation and lifecycle timeline.

A trip's cost rollup comes from its miles, revenue and per-mile
components; components the trip does not carry are filled from the best
matching rate. The timeline is derived from the trip's events using a
first-occurrence-wins policy per known event type.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import select
from sqlalchemy.orm import Session

from fleetops.costing import calc_cost
from fleetops.db.models import Event, Rate, Trip
from fleetops.serialize import format_ymd
from fleetops.utils.logger import get_logger

from .rates import CPM_FIELDS, find_rate

logger = get_logger(__name__)


class EventType(StrEnum):
    TRIP_STARTED = "TripStarted"
    ARRIVED_PU = "ArrivedPU"
    LEFT_PU = "LeftPU"
    CROSSED_BORDER = "CrossedBorder"
    ARRIVED_DEL = "ArrivedDEL"
    FINISHED_DEL = "FinishedDEL"


KNOWN_EVENT_TYPES = frozenset(member.value for member in EventType)


class TripStatus(StrEnum):
    CREATED = "Created"
    DISPATCHED = "Dispatched"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


@dataclass
class Timeline:
    """Lifecycle milestones and the durations between them, in minutes."""

    started_at: datetime | None = None
    arrived_pickup_at: datetime | None = None
    left_pickup_at: datetime | None = None
    crossed_border_at: datetime | None = None
    arrived_delivery_at: datetime | None = None
    finished_at: datetime | None = None
    elapsed_minutes: int | None = None
    pickup_dwell_minutes: int | None = None
    transit_minutes: int | None = None
    delivery_dwell_minutes: int | None = None
    event_count: int = 0
    ignored_events: int = 0


@dataclass
class TripTotals:
    """Result of one recalculation, as persisted on the trip."""

    trip_id: str
    miles: Decimal
    revenue: Decimal | None
    fixed_cpm: Decimal | None
    wage_cpm: Decimal | None
    add_ons_cpm: Decimal | None
    rolling_cpm: Decimal | None
    total_cpm: Decimal
    total_cost: Decimal
    profit: Decimal
    margin_pct: Decimal | None
    rate_id: str | None = None
    timeline: Timeline = field(default_factory=Timeline)


_MILESTONES = {
    EventType.TRIP_STARTED: "started_at",
    EventType.ARRIVED_PU: "arrived_pickup_at",
    EventType.LEFT_PU: "left_pickup_at",
    EventType.CROSSED_BORDER: "crossed_border_at",
    EventType.ARRIVED_DEL: "arrived_delivery_at",
    EventType.FINISHED_DEL: "finished_at",
}


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def week_start_for(moment: datetime) -> datetime:
    """Midnight UTC on the Sunday that starts ``moment``'s week."""
    day = as_utc(moment).date()
    sunday = day - timedelta(days=(day.weekday() + 1) % 7)
    return datetime.combine(sunday, time(), tzinfo=timezone.utc)


def _minutes(start: datetime | None, end: datetime | None) -> int | None:
    if start is None or end is None or end < start:
        return None
    return int((end - start).total_seconds() // 60)


def _event_sort_key(event: Event) -> tuple:
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return (
        as_utc(event.at) or epoch,
        as_utc(event.created_at) or epoch,
        event.id or "",
    )


def build_timeline(events: Iterable[Event]) -> Timeline:
    """Derive milestones from events in chronological order.

    The first event of each known type wins; later duplicates and unknown
    types are counted in ``ignored_events`` and otherwise ignored.
    """
    timeline = Timeline()
    for event in sorted(events, key=_event_sort_key):
        timeline.event_count += 1
        if event.type not in KNOWN_EVENT_TYPES:
            timeline.ignored_events += 1
            continue
        attr = _MILESTONES[EventType(event.type)]
        if getattr(timeline, attr) is not None:
            timeline.ignored_events += 1
            continue
        setattr(timeline, attr, as_utc(event.at))

    timeline.elapsed_minutes = _minutes(timeline.started_at, timeline.finished_at)
    timeline.pickup_dwell_minutes = _minutes(
        timeline.arrived_pickup_at, timeline.left_pickup_at
    )
    timeline.transit_minutes = _minutes(
        timeline.left_pickup_at, timeline.arrived_delivery_at
    )
    timeline.delivery_dwell_minutes = _minutes(
        timeline.arrived_delivery_at, timeline.finished_at
    )
    return timeline


def _rate_for(session: Session, trip: Trip) -> Rate | None:
    if trip.rate_ref is not None:
        return trip.rate_ref
    return find_rate(session, trip.type, trip.zone)


def recalc_trip_totals(session: Session, trip_id: str) -> TripTotals | None:
    """Recompute and persist a trip's cost rollup and event timeline.

    Running this twice on an unchanged trip and event set gives the same
    totals both times: components filled from a rate on the first run are
    stored, so the second run reads them back instead of looking them up.

    Args:
        session: Open database session. The caller owns the commit.
        trip_id: Trip identifier.

    Returns:
        The recomputed totals, or ``None`` when the trip does not exist.
    """
    trip = session.get(Trip, trip_id)
    if trip is None:
        return None

    if any(getattr(trip, name) is None for name in CPM_FIELDS):
        rate = _rate_for(session, trip)
        if rate is not None:
            for name in CPM_FIELDS:
                if getattr(trip, name) is None:
                    setattr(trip, name, getattr(rate, name))
            trip.rate_id = rate.id
            logger.info(
                "Filled missing CPM components of trip %s from rate %s",
                trip.id,
                rate.id,
            )

    cost = calc_cost(
        trip.miles,
        fixed_cpm=trip.fixed_cpm,
        wage_cpm=trip.wage_cpm,
        add_ons_cpm=trip.add_ons_cpm,
        rolling_cpm=trip.rolling_cpm,
        revenue=trip.revenue,
    )
    trip.total_cpm = cost.total_cpm
    trip.total_cost = cost.total_cost
    trip.profit = cost.profit
    trip.margin_pct = cost.margin_pct

    session.flush()
    events = session.scalars(select(Event).where(Event.trip_id == trip.id)).all()
    timeline = build_timeline(events)
    if timeline.started_at is not None:
        trip.trip_start = timeline.started_at
        trip.week_start = week_start_for(timeline.started_at)
    if timeline.finished_at is not None:
        trip.trip_end = timeline.finished_at
    if timeline.ignored_events:
        logger.debug(
            "Trip %s: %d events ignored for the timeline",
            trip.id,
            timeline.ignored_events,
        )

    session.flush()
    logger.info(
        "Recalculated trip %s (week of %s): total_cpm=%s total_cost=%s profit=%s",
        trip.id,
        format_ymd(trip.week_start),
        cost.total_cpm,
        cost.total_cost,
        cost.profit,
    )
    return TripTotals(
        trip_id=trip.id,
        miles=trip.miles,
        revenue=trip.revenue,
        fixed_cpm=trip.fixed_cpm,
        wage_cpm=trip.wage_cpm,
        add_ons_cpm=trip.add_ons_cpm,
        rolling_cpm=trip.rolling_cpm,
        total_cpm=cost.total_cpm,
        total_cost=cost.total_cost,
        profit=cost.profit,
        margin_pct=cost.margin_pct,
        rate_id=trip.rate_id,
        timeline=timeline,
    )
