from datetime import date, datetime, time, timedelta, timezone
from typing import List, NamedTuple

from sqlmodel import Session, select

from app.constants.order_status import OrderStatus
from app.exceptions import ValidationError
from app.models.order import Order

PAYMENT_FILTERS = ("all", "cash", "online", "mixed")


class SalesSummary(NamedTuple):
    day: date
    payment_filter: str
    orders: List[Order]
    total_revenue: float
    total_cash: float
    total_online: float


def _matches(order: Order, payment_filter: str) -> bool:
    cash, online = order.payment_cash or 0, order.payment_online or 0
    if payment_filter == "cash":
        return cash > 0 and online == 0
    if payment_filter == "online":
        return online > 0 and cash == 0
    if payment_filter == "mixed":
        return cash > 0 and online > 0
    return True


def get_sales_summary(session: Session, day: date, payment_filter: str = "all") -> SalesSummary:
    """Paid bills settled on one calendar day (UTC), newest first"""
    if payment_filter not in PAYMENT_FILTERS:
        raise ValidationError(f"Unknown payment filter '{payment_filter}'")

    start_of_day = datetime.combine(day, time.min, tzinfo=timezone.utc)
    statement = (
        select(Order)
        .where(Order.status == OrderStatus.paid.value)
        .where(Order.paid_at >= start_of_day)
        .where(Order.paid_at < start_of_day + timedelta(days=1))
        .order_by(Order.paid_at.desc())
    )
    orders = [o for o in session.exec(statement).all() if _matches(o, payment_filter)]

    return SalesSummary(
        day=day,
        payment_filter=payment_filter,
        orders=orders,
        total_revenue=sum(o.total_amount for o in orders),
        total_cash=sum(o.payment_cash for o in orders),
        total_online=sum(o.payment_online for o in orders),
    )
