"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import sys
import os
from contextlib import asynccontextmanager
from datetime import datetime, timedelta

import pytest
from fakeredis import FakeRedis
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Configuration required before config.py is imported
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("KV_BACKEND", "memory")
os.environ.setdefault("LANGUAGE", "en")
os.environ.setdefault("CATALOG_PAGE_SIZE", "12")
os.environ.setdefault("DEFAULT_CURRENCY_SYMBOL", "₦")

from db import Base
from models.product import Product, ProductDTO
from utils.kv_bridge import MemoryKeyValueBridge, RedisKeyValueBridge


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def engine():
    """In-memory SQLite shared across threads (TestClient runs routes in a worker thread)."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """Create database session."""
    session = Session(engine)
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def session_factory(session):
    """Session factory handing out the test session, rolling back on errors."""

    @asynccontextmanager
    async def factory():
        try:
            yield session
        except Exception:
            session.rollback()
            raise

    return factory


# ============================================================================
# Key-Value Bridge Fixtures
# ============================================================================

@pytest.fixture
def kv_bridge():
    return MemoryKeyValueBridge()


@pytest.fixture
def redis_client():
    """Create fake Redis client for testing (no real Redis server needed)."""
    client = FakeRedis(decode_responses=True)
    yield client
    client.flushall()
    client.close()


@pytest.fixture
def redis_kv_bridge(redis_client):
    return RedisKeyValueBridge(redis_client, prefix="test:")


# ============================================================================
# Product Fixtures
# ============================================================================

@pytest.fixture
def make_product():
    """Build a ProductDTO without touching the database."""

    def _make(product_id: str = "p-1", name: str = "Desk Lamp", price: float = 10.0, **kwargs) -> ProductDTO:
        kwargs.setdefault("quantity", 10)
        return ProductDTO(id=product_id, name=name, price=price, **kwargs)

    return _make


@pytest.fixture
def seed_products(session):
    """Insert products; later entries get later created_at so newest-first order is predictable."""

    def _seed(count: int = 1, **kwargs) -> list[Product]:
        base_time = datetime(2024, 1, 1, 12, 0, 0)
        products = []
        for i in range(count):
            values = {
                "id": f"prod-{i:03d}",
                "name": f"Product {i}",
                "price": 10.0 + i,
                "quantity": 5,
                "in_stock": True,
                "category": "General",
                "created_at": base_time + timedelta(minutes=i),
            }
            values.update(kwargs)
            product = Product(**values)
            session.add(product)
            products.append(product)
        session.commit()
        return products

    return _seed
