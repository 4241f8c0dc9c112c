"""
Custom exceptions for the order engine.
"""


class OrderError(Exception):
    """Base exception for order-related errors."""
    pass


class NotFoundError(OrderError):
    """Raised when a referenced order (or one of its lines) does not exist."""

    def __init__(self, entity, key, message=None):
        self.entity = entity
        self.key = key
        if message is None:
            message = f"{entity} '{key}' not found"
        super().__init__(message)


class ValidationError(OrderError):
    """Raised when a business rule is violated."""
    pass


class ConflictError(OrderError):
    """Raised when an order is in a state that does not allow the change."""

    def __init__(self, order_id, status, message=None):
        self.order_id = order_id
        self.status = status
        if message is None:
            message = f"Order '{order_id}' is {status} and can no longer be changed"
        super().__init__(message)
