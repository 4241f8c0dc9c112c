from datetime import date, datetime, timezone
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.database import get_session
from app.schemas.orders_schemas import OrderRead
from app.schemas.payment_schemas import SalesSummaryResponse
from app.services.sales_service import get_sales_summary

router = APIRouter()


@router.get("/summary", response_model=SalesSummaryResponse)
def sales_summary(
    day: Optional[date] = Query(None),
    payment_filter: Literal["all", "cash", "online", "mixed"] = "all",
    session: Session = Depends(get_session),
):
    summary = get_sales_summary(session, day or datetime.now(timezone.utc).date(), payment_filter)
    return SalesSummaryResponse(
        day=summary.day,
        payment_filter=summary.payment_filter,
        orders=[OrderRead.model_validate(o) for o in summary.orders],
        total_revenue=summary.total_revenue,
        total_cash=summary.total_cash,
        total_online=summary.total_online,
    )
