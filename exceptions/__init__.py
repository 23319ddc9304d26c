"""
Custom exceptions for the storefront.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── CartException
│   └── InsufficientStockException
├── CatalogException
│   └── CatalogFetchException
├── OrderException
│   ├── EmptyCartException
│   ├── MissingCustomerDetailsException
│   ├── OrderNotFoundException
│   ├── InvalidOrderStatusException
│   ├── OrderSubmissionException
│   └── InvalidTrackingQueryException
├── ProductException
│   └── ProductNotFoundException
├── LikeException
│   └── LikeToggleException
└── ReviewException
    └── InvalidReviewException

Usage:
------
Services raise specific exceptions:
    raise ProductNotFoundException(product_id="...")

The presentation layer catches them and renders a dismissible notice:
    try:
        await OrderService.place_order(cart, customer, session)
    except OrderException as e:
        show_notice(str(e))
"""

from .base import StorefrontException
from .cart import CartException, InsufficientStockException
from .catalog import CatalogException, CatalogFetchException
from .like import LikeException, LikeToggleException
from .order import (
    OrderException,
    EmptyCartException,
    MissingCustomerDetailsException,
    OrderNotFoundException,
    InvalidOrderStatusException,
    OrderSubmissionException,
    InvalidTrackingQueryException
)
from .product import ProductException, ProductNotFoundException
from .review import ReviewException, InvalidReviewException

__all__ = [
    # Base
    'StorefrontException',

    # Cart
    'CartException',
    'InsufficientStockException',

    # Catalog
    'CatalogException',
    'CatalogFetchException',

    # Like
    'LikeException',
    'LikeToggleException',

    # Order
    'OrderException',
    'EmptyCartException',
    'MissingCustomerDetailsException',
    'OrderNotFoundException',
    'InvalidOrderStatusException',
    'OrderSubmissionException',
    'InvalidTrackingQueryException',

    # Product
    'ProductException',
    'ProductNotFoundException',

    # Review
    'ReviewException',
    'InvalidReviewException',
]
