"""Order intake endpoints."""

from fastapi import APIRouter
from sqlalchemy import select

from fleetops.api.deps import SessionDep
from fleetops.api.schemas import OrderIn
from fleetops.db.models import Order
from fleetops.dto import map_order_to_dto
from fleetops.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("")
def list_orders(session: SessionDep) -> list[dict]:
    """Orders, newest first."""
    orders = session.scalars(
        select(Order).order_by(Order.created_at.desc(), Order.id)
    ).all()
    return [map_order_to_dto(order).to_json() for order in orders]


@router.post("")
def create_order(body: OrderIn, session: SessionDep) -> dict:
    order = Order(**body.model_dump())
    session.add(order)
    session.commit()
    logger.info("Created order %s for %s", order.id, order.customer)
    return {"ok": True, "id": order.id}
