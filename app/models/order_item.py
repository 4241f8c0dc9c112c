from sqlmodel import SQLModel, Field
from typing import Optional


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: str = Field(foreign_key="orders.id", index=True)

    # copied from the catalog when the line is placed
    item_name: str
    category_name: str

    quantity: int = 1
    rate: float
    total: float

    # table the line was first ordered on, set when a merge carries it over
    original_table: Optional[str] = None

    def recompute_total(self):
        self.total = self.quantity * self.rate
