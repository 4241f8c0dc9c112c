import logging
import time
from typing import List, Optional, Set

from sqlmodel import Session, select

from app.config import settings
from app.constants.order_status import (
    CLOSED_STATUSES,
    MANUAL_STATUSES,
    OrderStatus,
    can_transition,
    is_active,
)
from app.database import atomic
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.order import Order
from app.models.order_item import OrderItem
from app.notifications import OrderEvent, queue_order_event

logger = logging.getLogger(__name__)


# ---------- READS ----------

def normalize_table(table_number: Optional[str]) -> str:
    return (table_number or "").strip()


def get_order_by_id(session: Session, order_id: str) -> Optional[Order]:
    return session.get(Order, order_id)


def get_order_by_table(session: Session, table_number: str) -> Optional[Order]:
    """Get the active (not paid, not cancelled) order on a table"""
    statement = (
        select(Order)
        .where(Order.table_number == normalize_table(table_number))
        .where(Order.status.not_in(CLOSED_STATUSES))
        .order_by(Order.created_at)
    )
    return session.exec(statement).first()


def get_active_tables(session: Session) -> Set[str]:
    statement = select(Order.table_number).where(Order.status.not_in(CLOSED_STATUSES))
    return set(session.exec(statement).all())


def list_active_orders(session: Session) -> List[Order]:
    statement = (
        select(Order)
        .where(Order.status.not_in(CLOSED_STATUSES))
        .order_by(Order.updated_at.desc())
    )
    return list(session.exec(statement).all())


def require_order(session: Session, order_id: str) -> Order:
    order = session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order", order_id)
    return order


def require_active_order(session: Session, order_id: str) -> Order:
    order = require_order(session, order_id)
    if not is_active(order.status):
        raise ConflictError(order.id, order.status)
    return order


# ---------- WALK-INS ----------

def is_walk_in_table(table_number: str) -> bool:
    return table_number.startswith(settings.walk_in_prefix)


def new_walk_in_table(session: Session) -> str:
    stamp = int(time.time() * 1000)
    # two tabs opened within the same millisecond must not share a bill
    while get_order_by_table(session, f"{settings.walk_in_prefix}{stamp}"):
        stamp += 1
    return f"{settings.walk_in_prefix}{stamp}"


# ---------- MUTATIONS ----------

def create_order(
    *,
    session: Session,
    table_number: str,
    customer_name: Optional[str] = None,
) -> Order:
    """
    Open a bill on a table.

    Opening is idempotent: if the table already holds an active order that
    order is returned unchanged instead of creating a second bill.
    """
    table_number = normalize_table(table_number)
    if not table_number:
        raise ValidationError("Table number is required")

    with atomic(session):
        existing = get_order_by_table(session, table_number)
        if existing:
            logger.info(f"Table {table_number} already open as order {existing.id}")
            return existing

        if customer_name is not None:
            customer_name = customer_name.strip() or None
        if customer_name is None and is_walk_in_table(table_number):
            customer_name = settings.walk_in_label

        order = Order(
            table_number=table_number,
            customer_name=customer_name,
            table_history=[table_number],
            status=OrderStatus.open.value,
        )
        session.add(order)
        queue_order_event(session, OrderEvent.ORDER_OPENED, [order.id])

    session.refresh(order)
    logger.info(f"Opened order {order.id} on table {table_number}")
    return order


def open_walk_in(*, session: Session, customer_name: Optional[str] = None) -> Order:
    return create_order(
        session=session,
        table_number=new_walk_in_table(session),
        customer_name=(customer_name or "").strip() or settings.walk_in_label,
    )


def update_status(*, session: Session, order_id: str, status: str) -> Order:
    if status not in MANUAL_STATUSES:
        raise ValidationError(
            f"Status can only be set to {', '.join(MANUAL_STATUSES)}; got '{status}'"
        )

    with atomic(session):
        order = require_active_order(session, order_id)
        if order.status != status:
            if not can_transition(order.status, status):
                raise ValidationError(f"Cannot move order from {order.status} to {status}")
            order.status = status
        order.touch()
        session.add(order)
        queue_order_event(session, OrderEvent.STATUS_CHANGED, [order.id])

    logger.info(f"Order {order_id} status -> {status}")
    return order


def cancel_order(*, session: Session, order_id: str) -> Order:
    """Close an open or served bill without payment. Items are kept."""
    with atomic(session):
        order = require_active_order(session, order_id)
        order.status = OrderStatus.cancelled.value
        order.touch()
        session.add(order)
        queue_order_event(session, OrderEvent.ORDER_CANCELLED, [order.id])

    logger.info(f"Order {order_id} cancelled")
    return order


def _delete_with_items(session: Session, order: Order):
    items = session.exec(select(OrderItem).where(OrderItem.order_id == order.id)).all()
    for item in items:
        session.delete(item)
    session.flush()
    session.delete(order)


def delete_order(*, session: Session, order_id: str) -> None:
    """Hard-delete an order and its items. Unknown ids are ignored."""
    with atomic(session):
        order = session.get(Order, order_id)
        if not order:
            return
        _delete_with_items(session, order)
        queue_order_event(session, OrderEvent.ORDER_DELETED, [order_id])

    logger.info(f"Deleted order {order_id}")


def discard_if_empty(*, session: Session, order_id: str) -> bool:
    """
    Drop an abandoned bill: an active order with no lines and a zero total.
    Returns True when the order was deleted.
    """
    with atomic(session):
        order = session.get(Order, order_id)
        if not order or not is_active(order.status):
            return False

        has_items = session.exec(
            select(OrderItem.id).where(OrderItem.order_id == order_id)
        ).first()
        if has_items is not None or order.total_amount != 0:
            return False

        _delete_with_items(session, order)
        queue_order_event(session, OrderEvent.ORDER_DELETED, [order_id])

    logger.info(f"Discarded empty order {order_id}")
    return True
