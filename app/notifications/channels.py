from enum import Enum


class Collection(str, Enum):
    ORDERS = "orders"
    ORDER_ITEMS = "order_items"
