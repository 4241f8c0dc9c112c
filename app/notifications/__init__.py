from .channels import Collection
from .events import ChangeNotice, OrderEvent
from .dispatcher import ChangeFeed, attach_change_feed, queue_order_event

__all__ = [
    "Collection",
    "ChangeNotice",
    "OrderEvent",
    "ChangeFeed",
    "attach_change_feed",
    "queue_order_event",
]
