"""
Catalog-related exceptions.
"""

from .base import StorefrontException


class CatalogException(StorefrontException):
    """Base exception for catalog-related errors."""
    pass


class CatalogFetchException(CatalogException):
    """Raised when a catalog page cannot be fetched from the data service."""

    def __init__(self, search: str, category: str, cursor: int, reason: str):
        super().__init__(
            f"Failed to fetch catalog page {cursor} (search='{search}', category='{category}'): {reason}",
            details={'search': search, 'category': category, 'cursor': cursor, 'reason': reason}
        )
        self.search = search
        self.category = category
        self.cursor = cursor
        self.reason = reason
