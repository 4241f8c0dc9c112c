import logging
from typing import List, NamedTuple, Optional

from sqlmodel import Session, select

from app.constants.order_status import CLOSED_STATUSES
from app.database import atomic
from app.exceptions import ValidationError
from app.models.order import Order
from app.models.order_item import OrderItem
from app.notifications import OrderEvent, queue_order_event
from app.services.ledger_service import recalculate_order_total
from app.services.order_service import normalize_table, require_active_order

logger = logging.getLogger(__name__)


class MoveResult(NamedTuple):
    merged: bool
    order_id: str


def find_merge_target(session: Session, table_number: str, exclude_order_id: str) -> Optional[Order]:
    statement = (
        select(Order)
        .where(Order.table_number == normalize_table(table_number))
        .where(Order.status.not_in(CLOSED_STATUSES))
        .where(Order.id != exclude_order_id)
        .order_by(Order.created_at)
    )
    return session.exec(statement).first()


def append_table(history: List[str], table_number: str) -> List[str]:
    if history and history[-1] == table_number:
        return list(history)
    return [*history, table_number]


def merge_histories(target: List[str], source: List[str], table_number: str) -> List[str]:
    """
    Fold the moved bill's breadcrumb into the receiving bill's one.

    The receiving history comes first, then every table the moved bill
    visited that is not already listed. The result always ends on the table
    both bills now share.
    """
    merged = list(target)
    for entry in source:
        if entry not in merged:
            merged.append(entry)
    return append_table(merged, table_number)


def move_or_merge(*, session: Session, order_id: str, new_table_number: str) -> MoveResult:
    """
    Reassign a bill to another table.

    If the new table is free this is a plain move. If it already holds an
    active bill, the moved bill's lines are folded into it (each line keeps
    the table it was ordered on) and the moved bill is deleted.
    """
    new_table_number = normalize_table(new_table_number)
    if not new_table_number:
        raise ValidationError("Table number is required")

    with atomic(session):
        current = require_active_order(session, order_id)

        if current.table_number == new_table_number:
            return MoveResult(merged=False, order_id=current.id)

        target = find_merge_target(session, new_table_number, current.id)

        if not target:
            previous_table = current.table_number
            current.table_history = append_table(current.table_history or [previous_table], new_table_number)
            current.table_number = new_table_number
            current.touch()
            session.add(current)
            queue_order_event(session, OrderEvent.TABLE_MOVED, [current.id])
            result = MoveResult(merged=False, order_id=current.id)
        else:
            items = session.exec(
                select(OrderItem).where(OrderItem.order_id == current.id)
            ).all()
            for item in items:
                item.order_id = target.id
                if item.original_table is None:
                    item.original_table = current.table_number
                session.add(item)

            previous_table = current.table_number
            target.table_history = merge_histories(
                target.table_history or [target.table_number],
                current.table_history or [current.table_number],
                new_table_number,
            )
            recalculate_order_total(session, target)

            session.delete(current)
            queue_order_event(session, OrderEvent.ORDERS_MERGED, [target.id, order_id])
            result = MoveResult(merged=True, order_id=target.id)

    if result.merged:
        logger.info(f"Merged order {order_id} from table {previous_table} into {result.order_id} on {new_table_number}")
    else:
        logger.info(f"Moved order {order_id} from table {previous_table} to {new_table_number}")
    return result
