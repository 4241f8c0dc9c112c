import logging

from pydantic import ValidationError as SchemaError
from sqlalchemy import delete
from sqlmodel import Session, select

from app.database import atomic
from app.exceptions import ValidationError
from app.models.order import Order
from app.models.order_item import OrderItem
from app.notifications import OrderEvent, queue_order_event
from app.schemas.backup_schemas import OrderItemRecord, OrderRecord, RestoreResult, Snapshot

logger = logging.getLogger(__name__)


def export_snapshot(session: Session) -> Snapshot:
    """Full copy of the orders and order_items collections"""
    orders = session.exec(select(Order).order_by(Order.created_at)).all()
    items = session.exec(select(OrderItem).order_by(OrderItem.id)).all()

    return Snapshot(
        orders=[OrderRecord.model_validate(o) for o in orders],
        order_items=[OrderItemRecord.model_validate(i) for i in items],
    )


def restore_snapshot(*, session: Session, snapshot: Snapshot) -> RestoreResult:
    """
    Replace every order and line with the snapshot's contents.

    Both collections are cleared and repopulated in one transaction; if any
    record is rejected nothing is changed.
    """
    try:
        # records built without validation (model_construct) are checked here too
        snapshot = Snapshot.model_validate(snapshot.model_dump())
    except SchemaError as e:
        raise ValidationError(f"Snapshot rejected: {e.error_count()} invalid record(s)") from e

    order_ids = {record.id for record in snapshot.orders}
    orphans = [i for i in snapshot.order_items if i.order_id not in order_ids]
    if orphans:
        raise ValidationError(
            f"{len(orphans)} order item(s) reference orders missing from the snapshot"
        )

    with atomic(session):
        session.execute(delete(OrderItem))
        session.execute(delete(Order))
        session.expunge_all()

        for record in snapshot.orders:
            session.add(Order(**record.model_dump()))
        session.flush()

        for record in snapshot.order_items:
            session.add(OrderItem(**record.model_dump()))

        queue_order_event(session, OrderEvent.SNAPSHOT_RESTORED, order_ids)

    logger.info(f"Restored {len(snapshot.orders)} orders and {len(snapshot.order_items)} items")
    return RestoreResult(orders=len(snapshot.orders), order_items=len(snapshot.order_items))
