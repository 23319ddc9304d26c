"""
Unit Tests: CartService

Tests for services/cart.py (CartService) covering:
- Stock-checked add to cart, counting quantity already in the cart
- Rejection keys and format arguments
- Cart-wide stock validation before checkout
"""

import pytest

from services.cart import CartStore, CartService


@pytest.fixture
def cart(kv_bridge):
    return CartStore(kv_bridge)


class TestAddToCart:

    @pytest.mark.asyncio
    async def test_adds_single_item(self, cart, session, seed_products):
        seed_products(1, quantity=5)

        success, key, args = await CartService.add_to_cart(cart, "prod-000", 1, session)

        assert success is True
        assert key == "item_added_to_cart"
        assert args == {"product_name": "Product 0"}
        assert cart.get_item("prod-000").quantity == 1

    @pytest.mark.asyncio
    async def test_adds_multiple_items(self, cart, session, seed_products):
        seed_products(1, quantity=5)

        success, key, args = await CartService.add_to_cart(cart, "prod-000", 3, session)

        assert success is True
        assert key == "items_added_to_cart"
        assert args == {"product_name": "Product 0", "quantity": 3}

    @pytest.mark.asyncio
    async def test_existing_line_counts_against_stock(self, cart, session, seed_products):
        seed_products(1, quantity=5)
        await CartService.add_to_cart(cart, "prod-000", 4, session)

        success, key, args = await CartService.add_to_cart(cart, "prod-000", 2, session)

        assert success is False
        assert key == "add_to_cart_stock_exceeded"
        assert args == {"product_name": "Product 0", "available": 5, "in_cart": 4}
        assert cart.get_item("prod-000").quantity == 4

    @pytest.mark.asyncio
    async def test_can_fill_up_to_exact_stock(self, cart, session, seed_products):
        seed_products(1, quantity=5)
        await CartService.add_to_cart(cart, "prod-000", 4, session)

        success, _, _ = await CartService.add_to_cart(cart, "prod-000", 1, session)

        assert success is True
        assert cart.get_item("prod-000").quantity == 5

    @pytest.mark.asyncio
    async def test_out_of_stock_product(self, cart, session, seed_products):
        seed_products(1, quantity=0, in_stock=False)

        success, key, args = await CartService.add_to_cart(cart, "prod-000", 1, session)

        assert success is False
        assert key == "add_to_cart_out_of_stock"
        assert args == {"product_name": "Product 0"}
        assert cart.items == []

    @pytest.mark.asyncio
    async def test_in_stock_flag_off_rejects_even_with_quantity(self, cart, session, seed_products):
        seed_products(1, quantity=3, in_stock=False)

        success, key, _ = await CartService.add_to_cart(cart, "prod-000", 1, session)

        assert success is False
        assert key == "add_to_cart_out_of_stock"

    @pytest.mark.asyncio
    async def test_unknown_product(self, cart, session):
        success, key, args = await CartService.add_to_cart(cart, "missing", 1, session)

        assert success is False
        assert key == "add_to_cart_product_not_found"
        assert args == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, -2])
    async def test_invalid_quantity(self, cart, session, seed_products, quantity):
        seed_products(1)

        success, key, _ = await CartService.add_to_cart(cart, "prod-000", quantity, session)

        assert success is False
        assert key == "add_to_cart_invalid_quantity"
        assert cart.items == []


class TestValidateCartStock:

    @pytest.mark.asyncio
    async def test_no_problems_when_within_stock(self, cart, session, seed_products, make_product):
        seed_products(2, quantity=5)
        cart.add_item(make_product("prod-000"), 5)
        cart.add_item(make_product("prod-001"), 1)

        assert await CartService.validate_cart_stock(cart, session) == []

    @pytest.mark.asyncio
    async def test_reports_lines_over_stock(self, cart, session, seed_products, make_product):
        seed_products(2, quantity=2)
        cart.add_item(make_product("prod-000", name="Product 0"), 3)
        cart.add_item(make_product("prod-001", name="Product 1"), 1)

        problems = await CartService.validate_cart_stock(cart, session)

        assert len(problems) == 1
        assert problems[0].product_id == "prod-000"
        assert problems[0].product_name == "Product 0"
        assert problems[0].requested == 3
        assert problems[0].available == 2

    @pytest.mark.asyncio
    async def test_missing_and_unavailable_products_have_zero_available(self, cart, session, seed_products,
                                                                        make_product):
        seed_products(1, quantity=10, in_stock=False)
        cart.add_item(make_product("prod-000"), 1)
        cart.add_item(make_product("gone"), 1)

        problems = await CartService.validate_cart_stock(cart, session)

        assert [(p.product_id, p.available) for p in problems] == [("prod-000", 0), ("gone", 0)]

    @pytest.mark.asyncio
    async def test_empty_cart(self, cart, session):
        assert await CartService.validate_cart_stock(cart, session) == []
