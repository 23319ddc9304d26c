"""
Order-related exceptions.
"""

from .base import StorefrontException


class OrderException(StorefrontException):
    """Base exception for order-related errors."""
    pass


class EmptyCartException(OrderException):
    """Raised when trying to checkout with empty cart."""

    def __init__(self):
        super().__init__("Cannot place an order with an empty cart")


class MissingCustomerDetailsException(OrderException):
    """Raised when checkout is submitted with blank contact or shipping fields."""

    def __init__(self, missing_fields: list[str]):
        super().__init__(
            f"Missing customer details: {', '.join(missing_fields)}",
            details={'missing_fields': missing_fields}
        )
        self.missing_fields = missing_fields


class OrderNotFoundException(OrderException):
    """Raised when order is not found in the data service."""

    def __init__(self, order_id: str):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class InvalidOrderStatusException(OrderException):
    """Raised when an admin status update names an unknown status."""

    def __init__(self, order_id: str, status: str):
        super().__init__(
            f"Invalid status '{status}' for order {order_id}",
            details={'order_id': order_id, 'status': status}
        )
        self.order_id = order_id
        self.status = status


class OrderSubmissionException(OrderException):
    """Raised when the data service rejects the order insert."""

    def __init__(self, reason: str):
        super().__init__(
            f"Order submission failed: {reason}",
            details={'reason': reason}
        )
        self.reason = reason


class InvalidTrackingQueryException(OrderException):
    """Raised when an order lookup is attempted with an empty search value."""

    def __init__(self):
        super().__init__("Search value is required")
