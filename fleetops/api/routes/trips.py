"""Trip booking, status, and totals recalculation endpoints."""

from fastapi import APIRouter, HTTPException
from sqlalchemy import select

from fleetops.api.deps import SessionDep, get_or_404
from fleetops.api.schemas import TripIn, TripStatusIn
from fleetops.costing import calc_cost
from fleetops.db.models import Driver, Order, Rate, Trip, Unit, utcnow
from fleetops.dto import map_totals_to_dto, map_trip_to_dto
from fleetops.services.trips import recalc_trip_totals, week_start_for
from fleetops.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])

_REFERENCES = (
    ("order_id", Order, "Order"),
    ("driver_id", Driver, "Driver"),
    ("unit_id", Unit, "Unit"),
    ("rate_id", Rate, "Rate"),
)


@router.get("")
def list_trips(session: SessionDep) -> list[dict]:
    trips = session.scalars(
        select(Trip).order_by(Trip.created_at.desc(), Trip.id)
    ).all()
    return [map_trip_to_dto(trip).to_json() for trip in trips]


@router.get("/{trip_id}")
def get_trip(trip_id: str, session: SessionDep) -> dict:
    return map_trip_to_dto(get_or_404(session, Trip, trip_id, "Trip")).to_json()


@router.post("")
def create_trip(body: TripIn, session: SessionDep) -> dict:
    """Book a trip and store its initial cost rollup.

    The week start is the Sunday of the trip start, or of today when the
    trip has no start yet.
    """
    for field_name, model, label in _REFERENCES:
        key = getattr(body, field_name)
        if key is not None:
            get_or_404(session, model, key, label)

    cost = calc_cost(
        body.miles,
        fixed_cpm=body.fixed_cpm,
        wage_cpm=body.wage_cpm,
        add_ons_cpm=body.add_ons_cpm,
        rolling_cpm=body.rolling_cpm,
        revenue=body.revenue,
    )
    trip = Trip(
        **body.model_dump(),
        week_start=week_start_for(body.trip_start or utcnow()),
        total_cpm=cost.total_cpm,
        total_cost=cost.total_cost,
        profit=cost.profit,
        margin_pct=cost.margin_pct,
    )
    session.add(trip)
    session.commit()
    logger.info("Booked trip %s for %s on %s", trip.id, trip.driver, trip.unit)
    return {"ok": True, "tripId": trip.id}


@router.patch("/{trip_id}/status")
def update_status(trip_id: str, body: TripStatusIn, session: SessionDep) -> dict:
    trip = get_or_404(session, Trip, trip_id, "Trip")
    previous, trip.status = trip.status, body.status.value
    session.commit()
    logger.info("Trip %s status %s -> %s", trip_id, previous, trip.status)
    return {"ok": True, "trip": {"id": trip.id, "status": trip.status}}


@router.post("/{trip_id}/recalc")
def recalc_trip(trip_id: str, session: SessionDep) -> dict:
    """Recompute a trip's totals and timeline from its rate and events."""
    totals = recalc_trip_totals(session, trip_id)
    if totals is None:
        raise HTTPException(status_code=404, detail="Trip not found")
    session.commit()
    return {"ok": True, **map_totals_to_dto(totals).to_json()}
