"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for relationships to work correctly.
"""

from models.base import Base
from models.product import Product
from models.order import Order
from models.like import ProductLike
from models.store_config import StoreConfig
from models.review import Review

__all__ = [
    'Base',
    'Product',
    'Order',
    'ProductLike',
    'StoreConfig',
    'Review',
]
