"""
Like-related exceptions.
"""

from .base import StorefrontException


class LikeException(StorefrontException):
    """Base exception for like/wishlist errors."""
    pass


class LikeToggleException(LikeException):
    """Raised when the data service rejects a like insert or delete."""

    def __init__(self, product_id: str, actor_id: str, reason: str):
        super().__init__(
            f"Failed to toggle like for product {product_id}: {reason}",
            details={'product_id': product_id, 'actor_id': actor_id, 'reason': reason}
        )
        self.product_id = product_id
        self.actor_id = actor_id
        self.reason = reason
