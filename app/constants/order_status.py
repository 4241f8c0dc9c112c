from enum import Enum


class OrderStatus(str, Enum):
    open = "open"
    served = "served"
    paid = "paid"
    cancelled = "cancelled"


ALLOWED_TRANSITIONS = {
    "open": ["served", "cancelled"],
    "served": ["open", "paid", "cancelled"],
    "paid": [],
    "cancelled": []
}

CLOSED_STATUSES = ("paid", "cancelled")

# statuses a caller may set directly; paid/cancelled have their own operations
MANUAL_STATUSES = ("open", "served")


def is_active(status: str) -> bool:
    return status not in CLOSED_STATUSES


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, [])
