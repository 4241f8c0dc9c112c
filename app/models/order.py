from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime, timezone
from uuid import uuid4

from app.constants.order_status import OrderStatus


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Order(SQLModel, table=True):
    __tablename__ = "orders"
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)

    table_number: str = Field(index=True)
    customer_name: Optional[str] = None

    # oldest first; last entry is always table_number
    table_history: List[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )

    status: str = Field(default=OrderStatus.open.value, index=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    paid_at: Optional[datetime] = Field(default=None, index=True)

    total_amount: float = 0.0
    payment_cash: float = 0.0
    payment_online: float = 0.0

    exported_to_excel: bool = False

    def touch(self):
        self.updated_at = utc_now()
