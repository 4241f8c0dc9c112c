from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class OrderCreate(BaseModel):
    table_number: str
    customer_name: Optional[str] = None


class WalkInCreate(BaseModel):
    customer_name: Optional[str] = None


class StatusUpdate(BaseModel):
    status: Literal["open", "served"]


class MoveRequest(BaseModel):
    table_number: str


class MoveResponse(BaseModel):
    merged: bool
    order_id: str


class OrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: str
    item_name: str
    category_name: str
    quantity: int
    rate: float
    total: float
    original_table: Optional[str] = None


class OrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    table_number: str
    customer_name: Optional[str] = None
    table_history: List[str]
    status: str
    created_at: datetime
    updated_at: datetime
    paid_at: Optional[datetime] = None
    total_amount: float
    payment_cash: float
    payment_online: float
    exported_to_excel: bool


class OrderDetail(OrderRead):
    items: List[OrderItemRead] = []


class ItemAdd(BaseModel):
    item_name: str = Field(min_length=1)
    category_name: str = ""
    unit_price: float = Field(ge=0)


class ItemUpdate(BaseModel):
    quantity: int = Field(ge=1)
    rate: float = Field(ge=0)
