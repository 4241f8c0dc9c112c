from datetime import datetime, timezone
from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from app.notifications.channels import Collection


class OrderEvent(str, Enum):
    ORDER_OPENED = "order_opened"
    STATUS_CHANGED = "status_changed"
    ORDER_CANCELLED = "order_cancelled"
    ORDER_DELETED = "order_deleted"

    ITEMS_CHANGED = "items_changed"

    TABLE_MOVED = "table_moved"
    ORDERS_MERGED = "orders_merged"

    PAYMENT_RECORDED = "payment_recorded"
    PAYMENT_EDITED = "payment_edited"

    SNAPSHOT_RESTORED = "snapshot_restored"


class ChangeNotice(BaseModel):
    event: OrderEvent
    order_ids: List[str] = []
    collections: List[Collection] = []
    committed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
