"""Rate endpoints, including the type/zone lookup used when booking."""

from typing import Annotated

from fastapi import APIRouter, Query
from sqlalchemy import select

from fleetops.api.deps import SessionDep, get_or_404
from fleetops.api.schemas import RateIn
from fleetops.db.models import Rate
from fleetops.dto import map_rate_to_dto
from fleetops.serialize import to_num
from fleetops.services.rates import find_rate, total_cpm
from fleetops.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/rates", tags=["rates"])


@router.get("")
def list_rates(session: SessionDep) -> list[dict]:
    rates = session.scalars(select(Rate).order_by(Rate.type, Rate.zone)).all()
    return [map_rate_to_dto(rate).to_json() for rate in rates]


@router.get("/lookup")
def lookup_rate(
    session: SessionDep,
    type: Annotated[str | None, Query()] = None,
    zone: Annotated[str | None, Query()] = None,
) -> dict:
    """Resolve the rate that applies to a type and zone.

    Returns ``{"found": false}`` when no rate, not even a default, exists.
    """
    rate = find_rate(session, type, zone)
    if rate is None:
        return {"found": False}
    payload = map_rate_to_dto(rate).to_json()
    return {
        "found": True,
        "resolved": {"type": rate.type, "zone": rate.zone},
        "rateId": rate.id,
        "fixedCPM": payload["fixedCPM"],
        "wageCPM": payload["wageCPM"],
        "addOnsCPM": payload["addOnsCPM"],
        "rollingCPM": payload["rollingCPM"],
        "totalCPM": to_num(total_cpm(rate)),
    }


@router.post("")
def create_rate(body: RateIn, session: SessionDep) -> dict:
    rate = Rate(**body.model_dump())
    session.add(rate)
    session.commit()
    logger.info("Created rate %s (type=%s zone=%s)", rate.id, rate.type, rate.zone)
    return {"ok": True, "rate": map_rate_to_dto(rate).to_json()}


@router.put("/{rate_id}")
def update_rate(rate_id: str, body: RateIn, session: SessionDep) -> dict:
    rate = get_or_404(session, Rate, rate_id, "Rate")
    for name, value in body.model_dump().items():
        setattr(rate, name, value)
    session.commit()
    return {"ok": True, "rate": map_rate_to_dto(rate).to_json()}
