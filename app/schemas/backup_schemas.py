from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# line totals within half a cent of quantity * rate count as matching
LINE_TOTAL_TOLERANCE = 0.005


class OrderRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    table_number: str
    customer_name: Optional[str] = None
    table_history: List[str] = Field(min_length=1)
    status: str
    created_at: datetime
    updated_at: datetime
    paid_at: Optional[datetime] = None
    total_amount: float = 0.0
    payment_cash: float = 0.0
    payment_online: float = 0.0
    exported_to_excel: bool = False

    @model_validator(mode="after")
    def validate_history(self):
        if self.table_history[-1] != self.table_number:
            raise ValueError(
                f"Order {self.id}: table history must end on table {self.table_number}"
            )
        for previous, current in zip(self.table_history, self.table_history[1:]):
            if previous == current:
                raise ValueError(f"Order {self.id}: table {current} repeated in table history")
        return self


class OrderItemRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    order_id: str
    item_name: str
    category_name: str = ""
    quantity: int = Field(ge=1)
    rate: float = Field(ge=0)
    total: float
    original_table: Optional[str] = None

    @model_validator(mode="after")
    def validate_total(self):
        if abs(self.total - self.quantity * self.rate) >= LINE_TOTAL_TOLERANCE:
            raise ValueError(
                f"Line {self.item_name}: total {self.total} != {self.quantity} x {self.rate}"
            )
        return self


class Snapshot(BaseModel):
    taken_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    orders: List[OrderRecord] = []
    order_items: List[OrderItemRecord] = []


class RestoreResult(BaseModel):
    orders: int
    order_items: int
