"""
Unit Tests: OrderService

Tests for services/order.py covering:
- Order placement: snapshot, total, inventory decrement, cart clearing
- Validation order: customer fields, empty cart, stock
- Insert failure keeps the cart; inventory failure keeps the order
- Order tracking by id and by email
- Admin status updates
"""

import uuid
from datetime import datetime
from unittest.mock import patch, AsyncMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from enums.order_status import OrderStatus
from exceptions.cart import InsufficientStockException
from exceptions.order import (
    EmptyCartException,
    MissingCustomerDetailsException,
    OrderNotFoundException,
    InvalidOrderStatusException,
    OrderSubmissionException,
    InvalidTrackingQueryException
)
from models.order import Order, CustomerDetailsDTO
from models.product import Product
from models.store_config import StoreConfig
from services.cart import CartStore
from services.order import OrderService
from services.pricing import CurrencyService


@pytest.fixture
def cart(kv_bridge):
    return CartStore(kv_bridge)


@pytest.fixture
def customer():
    return CustomerDetailsDTO(
        customer_name="Ada Obi",
        customer_email="ada@example.com",
        customer_phone="+234 800 000 0000",
        shipping_address="12 Marina Road, Lagos"
    )


def product_quantity(session, product_id: str) -> tuple[int, bool]:
    session.expire_all()
    product = session.execute(select(Product).where(Product.id == product_id)).scalar()
    return product.quantity, product.in_stock


def add_order(session, email: str, created_at: datetime, **kwargs) -> Order:
    values = {
        "id": str(uuid.uuid4()),
        "customer_name": "Ada",
        "customer_email": email,
        "customer_phone": "0800",
        "shipping_address": "Lagos",
        "order_items": [{"product_id": "p-1", "name": "Lamp", "price": 10.0, "quantity": 1}],
        "total_amount": 10.0,
        "status": OrderStatus.NEW,
        "created_at": created_at,
    }
    values.update(kwargs)
    order = Order(**values)
    session.add(order)
    session.commit()
    return order


class TestPlaceOrder:

    @pytest.mark.asyncio
    async def test_places_order_and_clears_cart(self, cart, customer, session, seed_products, make_product):
        seed_products(2, quantity=5)
        cart.add_item(make_product("prod-000", name="Product 0", price=10.0), 2)
        cart.add_item(make_product("prod-001", name="Product 1", price=4.5), 1)

        placed = await OrderService.place_order(cart, customer, session)

        assert placed.inventory_updated is True
        assert placed.handoff is None
        assert cart.items == []

        order = placed.order
        assert order.id is not None
        assert order.status == OrderStatus.NEW
        assert order.total_amount == pytest.approx(24.5)
        assert [(item.product_id, item.quantity, item.price) for item in order.order_items] == [
            ("prod-000", 2, 10.0), ("prod-001", 1, 4.5)
        ]

        stored = session.get(Order, order.id)
        assert stored.customer_email == "ada@example.com"
        assert stored.order_items[0]["name"] == "Product 0"

        assert product_quantity(session, "prod-000") == (3, True)
        assert product_quantity(session, "prod-001") == (4, True)

    @pytest.mark.asyncio
    async def test_item_snapshot_keeps_price_at_add_time(self, cart, customer, session, seed_products, make_product):
        seed_products(1, quantity=5, price=99.0)
        cart.add_item(make_product("prod-000", price=10.0), 1)

        placed = await OrderService.place_order(cart, customer, session)

        assert placed.order.order_items[0].price == 10.0
        assert placed.order.total_amount == pytest.approx(10.0)

    @pytest.mark.asyncio
    async def test_selling_last_unit_marks_out_of_stock(self, cart, customer, session, seed_products, make_product):
        seed_products(1, quantity=2)
        cart.add_item(make_product("prod-000"), 2)

        await OrderService.place_order(cart, customer, session)

        assert product_quantity(session, "prod-000") == (0, False)

    @pytest.mark.asyncio
    async def test_customer_fields_are_trimmed(self, cart, session, seed_products, make_product):
        seed_products(1)
        cart.add_item(make_product("prod-000"), 1)
        customer = CustomerDetailsDTO(customer_name="  Ada ", customer_email=" ada@example.com ",
                                      customer_phone=" 0800 ", shipping_address=" Lagos ")

        placed = await OrderService.place_order(cart, customer, session)

        assert placed.order.customer_name == "Ada"
        assert placed.order.customer_email == "ada@example.com"

    @pytest.mark.asyncio
    async def test_blank_fields_rejected_before_anything_else(self, cart, session):
        customer = CustomerDetailsDTO(customer_name="Ada", customer_email="   ")

        with pytest.raises(MissingCustomerDetailsException) as exc_info:
            await OrderService.place_order(cart, customer, session)

        assert exc_info.value.missing_fields == ["customer_email", "customer_phone", "shipping_address"]

    @pytest.mark.asyncio
    async def test_empty_cart_rejected(self, cart, customer, session):
        with pytest.raises(EmptyCartException):
            await OrderService.place_order(cart, customer, session)

        assert session.execute(select(Order)).scalars().all() == []

    @pytest.mark.asyncio
    async def test_insufficient_stock_rejected(self, cart, customer, session, seed_products, make_product):
        seed_products(1, quantity=1)
        cart.add_item(make_product("prod-000"), 3)

        with pytest.raises(InsufficientStockException) as exc_info:
            await OrderService.place_order(cart, customer, session)

        assert exc_info.value.requested == 3
        assert exc_info.value.available == 1
        assert cart.get_total_items() == 3
        assert session.execute(select(Order)).scalars().all() == []

    @pytest.mark.asyncio
    async def test_insert_failure_keeps_cart(self, cart, customer, session, seed_products, make_product):
        seed_products(1)
        cart.add_item(make_product("prod-000"), 1)

        with patch("services.order.OrderRepository.create",
                   new=AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("offline")))):
            with pytest.raises(OrderSubmissionException):
                await OrderService.place_order(cart, customer, session)

        assert cart.get_total_items() == 1
        assert product_quantity(session, "prod-000") == (5, True)

    @pytest.mark.asyncio
    async def test_inventory_failure_keeps_order(self, cart, customer, session, seed_products, make_product):
        seed_products(1)
        cart.add_item(make_product("prod-000"), 1)

        with patch("services.order.ProductRepository.decrement_quantity",
                   new=AsyncMock(side_effect=OperationalError("UPDATE", {}, Exception("offline")))):
            placed = await OrderService.place_order(cart, customer, session)

        assert placed.inventory_updated is False
        assert cart.items == []
        assert session.get(Order, placed.order.id) is not None
        assert product_quantity(session, "prod-000") == (5, True)

    @pytest.mark.asyncio
    async def test_unexpected_inventory_error_still_clears_cart(self, cart, customer, session, kv_bridge,
                                                                seed_products, make_product):
        seed_products(1)
        cart.add_item(make_product("prod-000"), 1)

        with patch("services.order.ProductRepository.decrement_quantity",
                   new=AsyncMock(side_effect=RuntimeError("driver crashed"))):
            with pytest.raises(RuntimeError):
                await OrderService.place_order(cart, customer, session)

        assert cart.items == []
        assert CartStore(kv_bridge).items == []
        assert len(session.execute(select(Order)).scalars().all()) == 1

    @pytest.mark.asyncio
    async def test_builds_handoff_with_currency(self, cart, customer, session, session_factory, seed_products,
                                                make_product):
        seed_products(1)
        session.add(StoreConfig(id="cfg", currency_symbol="$", whatsapp_link="https://wa.me/2348000000000"))
        session.commit()
        currency = CurrencyService(session_factory)
        await currency.load()
        cart.add_item(make_product("prod-000", name="Lamp", price=10.0), 2)

        placed = await OrderService.place_order(cart, customer, session, currency)

        handoff = placed.handoff
        assert handoff.web_url.startswith("https://wa.me/2348000000000?text=")
        assert handoff.native_url.startswith("whatsapp://send?phone=2348000000000&text=")
        assert "1. Lamp - Qty: 2 - $20.00" in handoff.message
        assert "Total: $20.00" in handoff.message
        assert placed.order.id in handoff.message
        assert "Ada Obi" in handoff.message


class TestTrackOrder:

    @pytest.mark.asyncio
    async def test_by_id(self, session):
        order = add_order(session, "ada@example.com", datetime(2024, 1, 1))

        found = await OrderService.track_order(order.id.upper(), session)

        assert found.id == order.id

    @pytest.mark.asyncio
    async def test_by_email_returns_newest(self, session):
        add_order(session, "ada@example.com", datetime(2024, 1, 1), total_amount=1.0)
        newest = add_order(session, "Ada@Example.com", datetime(2024, 3, 1), total_amount=3.0)
        add_order(session, "ada@example.com", datetime(2024, 2, 1), total_amount=2.0)

        found = await OrderService.track_order("  ADA@example.com ", session)

        assert found.id == newest.id
        assert found.order_items[0].name == "Lamp"

    @pytest.mark.asyncio
    async def test_email_must_match_exactly(self, session):
        add_order(session, "ada@example.com", datetime(2024, 1, 1))

        assert await OrderService.track_order("ada@example", session) is None
        assert await OrderService.track_order("example.com", session) is None

    @pytest.mark.asyncio
    async def test_unknown_id(self, session):
        assert await OrderService.track_order(str(uuid.uuid4()), session) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["", "   ", None])
    async def test_empty_search_value(self, session, value):
        with pytest.raises(InvalidTrackingQueryException):
            await OrderService.track_order(value, session)


class TestUpdateStatus:

    @pytest.mark.asyncio
    async def test_any_status_can_be_set(self, session):
        order = add_order(session, "ada@example.com", datetime(2024, 1, 1))

        updated = await OrderService.update_status(order.id, OrderStatus.DELIVERED, session)
        assert updated.status == OrderStatus.DELIVERED

        updated = await OrderService.update_status(order.id, "processing", session)
        assert updated.status == OrderStatus.PROCESSING

    @pytest.mark.asyncio
    async def test_unknown_status(self, session):
        order = add_order(session, "ada@example.com", datetime(2024, 1, 1))

        with pytest.raises(InvalidOrderStatusException):
            await OrderService.update_status(order.id, "cancelled", session)

    @pytest.mark.asyncio
    async def test_unknown_order(self, session):
        with pytest.raises(OrderNotFoundException):
            await OrderService.update_status("missing", OrderStatus.SHIPPED, session)

    def test_status_ordering(self):
        assert OrderStatus.NEW < OrderStatus.PROCESSING < OrderStatus.SHIPPED < OrderStatus.DELIVERED

    def test_status_comparisons(self):
        assert OrderStatus.NEW <= OrderStatus.SHIPPED
        assert OrderStatus.SHIPPED <= OrderStatus.SHIPPED
        assert OrderStatus.DELIVERED > OrderStatus.PROCESSING
        assert OrderStatus.DELIVERED >= OrderStatus.DELIVERED
        assert not OrderStatus.NEW > OrderStatus.PROCESSING
        assert max(OrderStatus.SHIPPED, OrderStatus.NEW, OrderStatus.PROCESSING) == OrderStatus.SHIPPED

    def test_comparison_with_other_types_is_unsupported(self):
        with pytest.raises(TypeError):
            OrderStatus.NEW < "processing"
        with pytest.raises(TypeError):
            OrderStatus.NEW >= 1
