"""Driver roster endpoints."""

from fastapi import APIRouter
from sqlalchemy import select, update

from fleetops.api.deps import SessionDep, get_or_404
from fleetops.api.schemas import DriverIn
from fleetops.db.models import Driver, Trip
from fleetops.dto import map_driver_to_dto
from fleetops.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/drivers", tags=["drivers"])


@router.get("")
def list_drivers(session: SessionDep) -> list[dict]:
    drivers = session.scalars(select(Driver).order_by(Driver.name)).all()
    return [map_driver_to_dto(driver).to_json() for driver in drivers]


@router.post("")
def create_driver(body: DriverIn, session: SessionDep) -> dict:
    driver = Driver(name=body.name, home_base=body.home_base, active=body.active)
    session.add(driver)
    session.commit()
    logger.info("Created driver %s (%s)", driver.id, driver.name)
    return {"ok": True, "driver": map_driver_to_dto(driver).to_json()}


@router.put("/{driver_id}")
def update_driver(driver_id: str, body: DriverIn, session: SessionDep) -> dict:
    driver = get_or_404(session, Driver, driver_id, "Driver")
    driver.name = body.name
    driver.home_base = body.home_base
    driver.active = body.active
    session.commit()
    logger.info("Updated driver %s", driver_id)
    return {"ok": True}


@router.delete("/{driver_id}")
def delete_driver(driver_id: str, session: SessionDep) -> dict:
    """Delete a driver. Trips keep the driver name but lose the link."""
    driver = get_or_404(session, Driver, driver_id, "Driver")
    session.execute(
        update(Trip).where(Trip.driver_id == driver_id).values(driver_id=None)
    )
    session.delete(driver)
    session.commit()
    logger.info("Deleted driver %s", driver_id)
    return {"ok": True}
