"""Trip event log endpoints."""

from fastapi import APIRouter
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from fleetops.api.deps import SessionDep, get_or_404
from fleetops.api.schemas import EventIn
from fleetops.db.models import Event, Trip, utcnow
from fleetops.dto import map_event_to_dto
from fleetops.services.trips import KNOWN_EVENT_TYPES
from fleetops.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


@router.get("")
def list_events(session: SessionDep) -> list[dict]:
    """Events newest first, each with its trip."""
    events = session.scalars(
        select(Event)
        .options(selectinload(Event.trip))
        .order_by(Event.created_at.desc(), Event.at.desc(), Event.id)
    ).all()
    return [map_event_to_dto(event, include_trip=True).to_json() for event in events]


@router.post("")
def create_event(body: EventIn, session: SessionDep) -> dict:
    get_or_404(session, Trip, body.trip_id, "Trip")
    if body.type not in KNOWN_EVENT_TYPES:
        logger.warning("Recording unrecognised event type %r", body.type)

    event = Event(
        trip_id=body.trip_id,
        type=body.type,
        at=body.at or utcnow(),
        location=body.location,
        notes=body.notes,
    )
    session.add(event)
    session.commit()
    logger.info("Logged %s for trip %s", event.type, event.trip_id)
    return {"ok": True, "id": event.id}
