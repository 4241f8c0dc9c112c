import logging
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from app.database import atomic
from app.exceptions import NotFoundError, ValidationError
from app.models.order import Order
from app.models.order_item import OrderItem
from app.notifications import OrderEvent, queue_order_event
from app.services.order_service import require_active_order

logger = logging.getLogger(__name__)


def get_order_items(session: Session, order_id: str) -> List[OrderItem]:
    statement = (
        select(OrderItem)
        .where(OrderItem.order_id == order_id)
        .order_by(OrderItem.id)
    )
    return list(session.exec(statement).all())


def recalculate_order_total(session: Session, order: Order) -> float:
    """Re-derive order.total_amount from its lines and stamp updated_at"""
    session.flush()
    total = session.exec(
        select(func.coalesce(func.sum(OrderItem.total), 0.0))
        .where(OrderItem.order_id == order.id)
    ).one()

    order.total_amount = float(total)
    order.touch()
    session.add(order)
    return order.total_amount


def _require_line(session: Session, order_id: str, item_id: int) -> OrderItem:
    item = session.get(OrderItem, item_id)
    if not item or item.order_id != order_id:
        raise NotFoundError("OrderItem", item_id)
    return item


def add_item(
    *,
    session: Session,
    order_id: str,
    item_name: str,
    category_name: str,
    unit_price: float,
) -> OrderItem:
    """
    Add one unit of a menu item to an order.

    Lines carried over by a merge keep their original table and are never
    collapsed with new units; a fresh line is started instead.
    """
    if unit_price < 0:
        raise ValidationError("Unit price cannot be negative")

    with atomic(session):
        order = require_active_order(session, order_id)

        item = session.exec(
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .where(OrderItem.item_name == item_name)
            .where(OrderItem.original_table.is_(None))
        ).first()

        if item:
            item.quantity += 1
            item.recompute_total()
        else:
            item = OrderItem(
                order_id=order_id,
                item_name=item_name,
                category_name=category_name,
                quantity=1,
                rate=unit_price,
                total=unit_price,
            )
        session.add(item)

        recalculate_order_total(session, order)
        queue_order_event(session, OrderEvent.ITEMS_CHANGED, [order_id])

    session.refresh(item)
    logger.info(f"Order {order_id}: {item_name} x{item.quantity}")
    return item


def remove_item(*, session: Session, order_id: str, item_id: int) -> None:
    """Delete a whole line from the bill, whatever its quantity"""
    with atomic(session):
        order = require_active_order(session, order_id)
        item = _require_line(session, order_id, item_id)

        session.delete(item)
        recalculate_order_total(session, order)
        queue_order_event(session, OrderEvent.ITEMS_CHANGED, [order_id])

    logger.info(f"Order {order_id}: removed line {item_id}")


def decrement_item(*, session: Session, order_id: str, item_id: int) -> Optional[OrderItem]:
    """
    Take one unit off a line; the line is deleted when it reaches zero.
    Returns the remaining line, or None once it is gone.
    """
    with atomic(session):
        order = require_active_order(session, order_id)
        item = _require_line(session, order_id, item_id)

        if item.quantity > 1:
            item.quantity -= 1
            item.recompute_total()
            session.add(item)
            remaining = item
        else:
            session.delete(item)
            remaining = None

        recalculate_order_total(session, order)
        queue_order_event(session, OrderEvent.ITEMS_CHANGED, [order_id])

    if remaining is not None:
        session.refresh(remaining)
    return remaining


def update_line_item(
    *,
    session: Session,
    order_id: str,
    item_id: int,
    quantity: int,
    rate: float,
) -> OrderItem:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError("Quantity must be a positive whole number")
    if rate < 0:
        raise ValidationError("Rate cannot be negative")

    with atomic(session):
        order = require_active_order(session, order_id)
        item = _require_line(session, order_id, item_id)

        item.quantity = quantity
        item.rate = rate
        item.recompute_total()
        session.add(item)

        recalculate_order_total(session, order)
        queue_order_event(session, OrderEvent.ITEMS_CHANGED, [order_id])

    session.refresh(item)
    logger.info(f"Order {order_id}: line {item_id} corrected to {quantity} x {rate}")
    return item
