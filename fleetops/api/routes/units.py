"""Unit (truck) roster endpoints."""

from fastapi import APIRouter
from sqlalchemy import select

from fleetops.api.deps import SessionDep, get_or_404
from fleetops.api.schemas import UnitIn
from fleetops.db.models import Unit
from fleetops.dto import map_unit_to_dto
from fleetops.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/units", tags=["units"])


@router.get("")
def list_units(session: SessionDep) -> list[dict]:
    units = session.scalars(select(Unit).order_by(Unit.code)).all()
    return [map_unit_to_dto(unit).to_json() for unit in units]


@router.post("")
def create_unit(body: UnitIn, session: SessionDep) -> dict:
    unit = Unit(
        code=body.code, type=body.type, home_base=body.home_base, active=body.active
    )
    session.add(unit)
    session.commit()
    logger.info("Created unit %s (%s)", unit.id, unit.code)
    return {"ok": True, "unit": map_unit_to_dto(unit).to_json()}


@router.put("/{unit_id}")
def update_unit(unit_id: str, body: UnitIn, session: SessionDep) -> dict:
    unit = get_or_404(session, Unit, unit_id, "Unit")
    unit.code = body.code
    unit.type = body.type
    unit.home_base = body.home_base
    unit.active = body.active
    session.commit()
    return {"ok": True, "unit": map_unit_to_dto(unit).to_json()}
