"""
Review-related exceptions.
"""

from .base import StorefrontException


class ReviewException(StorefrontException):
    """Base exception for review-related errors."""
    pass


class InvalidReviewException(ReviewException):
    """Raised when a submitted review fails validation."""

    def __init__(self, reason: str, message_key: str):
        super().__init__(
            f"Invalid review: {reason}",
            details={'reason': reason, 'message_key': message_key}
        )
        self.reason = reason
        self.message_key = message_key
