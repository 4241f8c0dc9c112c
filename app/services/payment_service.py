import logging

from sqlmodel import Session

from app.constants.order_status import OrderStatus
from app.database import atomic
from app.exceptions import ValidationError
from app.models.order import Order
from app.notifications import OrderEvent, queue_order_event
from app.services.order_service import require_order

logger = logging.getLogger(__name__)

# tenders within half a cent of the bill count as matching
TENDER_TOLERANCE = 0.005


def tender_discrepancy(order: Order) -> float:
    """Amount tendered minus amount billed; 0 when the split matches"""
    difference = (order.payment_cash or 0) + (order.payment_online or 0) - (order.total_amount or 0)
    if abs(difference) < TENDER_TOLERANCE:
        return 0.0
    return round(difference, 2)


def _validate_tenders(cash_amount: float, online_amount: float):
    if cash_amount < 0 or online_amount < 0:
        raise ValidationError("Payment amounts cannot be negative")


def process_payment(
    *,
    session: Session,
    order_id: str,
    cash_amount: float,
    online_amount: float,
) -> Order:
    """
    Settle a served bill.

    The split between cash and online is recorded as given and is not forced
    to equal the bill; a mismatch is logged and reported through
    tender_discrepancy(). total_amount keeps the sum of the lines.
    """
    _validate_tenders(cash_amount, online_amount)

    with atomic(session):
        order = require_order(session, order_id)

        if order.status != OrderStatus.served.value:
            raise ValidationError(
                f"Order must be served before payment. Current status: {order.status}"
            )

        order.status = OrderStatus.paid.value
        order.payment_cash = cash_amount
        order.payment_online = online_amount
        order.touch()
        order.paid_at = order.updated_at
        session.add(order)
        queue_order_event(session, OrderEvent.PAYMENT_RECORDED, [order.id])

    difference = tender_discrepancy(order)
    if difference:
        logger.warning(
            f"Order {order_id} paid with tender mismatch: "
            f"cash {cash_amount} + online {online_amount} vs total {order.total_amount} ({difference:+})"
        )
    else:
        logger.info(f"Order {order_id} paid: cash {cash_amount}, online {online_amount}")
    return order


def edit_payment(
    *,
    session: Session,
    order_id: str,
    cash_amount: float,
    online_amount: float,
) -> Order:
    """
    Correct the tender split of a paid bill.

    From here on the split is authoritative: total_amount becomes
    cash + online and no longer tracks the sum of the lines.
    """
    _validate_tenders(cash_amount, online_amount)

    with atomic(session):
        order = require_order(session, order_id)

        if order.status != OrderStatus.paid.value:
            raise ValidationError(f"Only paid orders can be corrected. Current status: {order.status}")

        previous_total = order.total_amount
        order.payment_cash = cash_amount
        order.payment_online = online_amount
        order.total_amount = cash_amount + online_amount
        order.touch()
        session.add(order)
        queue_order_event(session, OrderEvent.PAYMENT_EDITED, [order.id])

    logger.info(f"Order {order_id} payment corrected: total {previous_total} -> {order.total_amount}")
    return order
