from datetime import date
from typing import List

from pydantic import BaseModel, Field

from app.schemas.orders_schemas import OrderRead


class PaymentRequest(BaseModel):
    cash_amount: float = Field(default=0, ge=0)
    online_amount: float = Field(default=0, ge=0)


class PaymentResponse(BaseModel):
    order: OrderRead
    tender_discrepancy: float


class SalesSummaryResponse(BaseModel):
    day: date
    payment_filter: str
    orders: List[OrderRead]
    total_revenue: float
    total_cash: float
    total_online: float
