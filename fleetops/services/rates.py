"""Rate lookup with fallback from specific to default rates."""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from fleetops.costing import ZERO, to_decimal
from fleetops.db.models import Rate
from fleetops.utils.logger import get_logger

logger = get_logger(__name__)

CPM_FIELDS = ("fixed_cpm", "wage_cpm", "add_ons_cpm", "rolling_cpm")


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _first(session: Session, type_: str | None, zone: str | None) -> Rate | None:
    stmt = (
        select(Rate)
        .where(Rate.type.is_(None) if type_ is None else Rate.type == type_)
        .where(Rate.zone.is_(None) if zone is None else Rate.zone == zone)
        .order_by(Rate.created_at, Rate.id)
        .limit(1)
    )
    return session.scalars(stmt).first()


def find_rate(
    session: Session, type_: str | None = None, zone: str | None = None
) -> Rate | None:
    """Find the most specific rate for a truck type and zone.

    Tries, in order: exact type and zone, type with no zone, zone with no
    type, then the default rate that has neither.

    Args:
        session: Open database session.
        type_: Truck or equipment type.
        zone: Operating zone.

    Returns:
        The matching rate, or ``None`` if not even a default rate exists.
    """
    type_, zone = _clean(type_), _clean(zone)
    candidates: list[tuple[str | None, str | None]] = []
    if type_ and zone:
        candidates.append((type_, zone))
    if type_:
        candidates.append((type_, None))
    if zone:
        candidates.append((None, zone))
    candidates.append((None, None))

    for candidate_type, candidate_zone in candidates:
        rate = _first(session, candidate_type, candidate_zone)
        if rate is not None:
            logger.debug(
                "Resolved rate %s for type=%s zone=%s", rate.id, type_, zone
            )
            return rate
    logger.debug("No rate found for type=%s zone=%s", type_, zone)
    return None


def total_cpm(rate: Rate) -> Decimal:
    return sum((to_decimal(getattr(rate, name)) for name in CPM_FIELDS), ZERO)
