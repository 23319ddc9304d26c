import logging
import re

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_commit, session_rollback
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
from models.order import OrderDTO, OrderItemDTO, CustomerDetailsDTO, PlacedOrderDTO
from repositories.order import OrderRepository
from repositories.product import ProductRepository
from services.cart import CartStore, CartService
from services.notification import OrderHandoffService
from services.pricing import CurrencyService

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)

CUSTOMER_FIELDS = ("customer_name", "customer_email", "customer_phone", "shipping_address")


class OrderService:

    @staticmethod
    def snapshot_items(cart: CartStore) -> list[OrderItemDTO]:
        """Freeze the cart lines (product, quantity, price at time of order)."""
        return [
            OrderItemDTO(
                product_id=line.product.id,
                name=line.product.name,
                price=line.product.price,
                quantity=line.quantity
            )
            for line in cart.items
        ]

    @staticmethod
    async def place_order(cart: CartStore,
                          customer: CustomerDetailsDTO,
                          session: AsyncSession | Session,
                          currency: CurrencyService | None = None) -> PlacedOrderDTO:
        """
        Create an order from the cart.

        Flow:
        1. Validate customer fields and that the cart is not empty
        2. Check cart lines against current stock (opportunistic, no reservation)
        3. Insert the order with a frozen item snapshot and commit
        4. Decrement inventory (best-effort; a failure never undoes the order)
        5. Clear the cart and build the messaging hand-off

        The cart is only cleared once the order is committed.

        Raises:
            MissingCustomerDetailsException: blank contact/shipping fields
            EmptyCartException: nothing to order
            InsufficientStockException: a line exceeds current stock
            OrderSubmissionException: the data service rejected the order
        """
        customer = CustomerDetailsDTO(**{
            field: (getattr(customer, field) or "").strip() for field in CUSTOMER_FIELDS
        })
        missing = [field for field in CUSTOMER_FIELDS if not getattr(customer, field)]
        if missing:
            raise MissingCustomerDetailsException(missing)

        if not cart.items:
            raise EmptyCartException()

        problems = await CartService.validate_cart_stock(cart, session)
        if problems:
            problem = problems[0]
            raise InsufficientStockException(problem.product_id, problem.requested, problem.available)

        items = OrderService.snapshot_items(cart)
        order_dto = OrderDTO(
            customer_name=customer.customer_name,
            customer_email=customer.customer_email,
            customer_phone=customer.customer_phone,
            shipping_address=customer.shipping_address,
            order_items=items,
            total_amount=cart.get_total_price(),
            status=OrderStatus.NEW
        )

        try:
            order = await OrderRepository.create(order_dto, session)
            await session_commit(session)
        except SQLAlchemyError as e:
            await session_rollback(session)
            logger.error(f"[Order] Order insert failed: {e}")
            raise OrderSubmissionException(str(e)) from e

        logger.info(f"[Order] Order {order.id} placed: {len(items)} lines, total {order.total_amount:.2f}")

        try:
            inventory_updated = await OrderService.decrement_inventory(items, session)
        finally:
            # The order is committed, so the cart empties even if the stock update blows up
            cart.clear()

        handoff = None
        if currency is not None:
            store_config = currency.store_config
            message = OrderHandoffService.compose_summary(
                items, order.total_amount, currency.currency_symbol, customer, order.id
            )
            handoff = OrderHandoffService.build_handoff(
                store_config.whatsapp_link if store_config else None, message
            )

        return PlacedOrderDTO(order=order, handoff=handoff, inventory_updated=inventory_updated)

    @staticmethod
    async def decrement_inventory(items: list[OrderItemDTO], session: AsyncSession | Session) -> bool:
        """
        Subtract ordered quantities from product stock.

        Not transactional with the order insert and racy under concurrent
        checkouts of the same product.

        Returns:
            False if the update failed (logged, order unaffected)
        """
        try:
            for item in items:
                new_quantity = await ProductRepository.decrement_quantity(item.product_id, item.quantity, session)
                if new_quantity is None:
                    logger.warning(f"[Order] Product {item.product_id} vanished before inventory update")
            await session_commit(session)
        except SQLAlchemyError as e:
            await session_rollback(session)
            logger.error(f"[Order] Inventory update failed: {e}")
            return False
        return True

    @staticmethod
    async def track_order(search_value: str, session: AsyncSession | Session) -> OrderDTO | None:
        """
        Look up one order by id or customer email.

        A UUID-shaped value matches the order id exactly. Anything else is an
        exact, case-insensitive email match (no partial matching). The newest
        matching order wins.
        """
        value = (search_value or "").strip()
        if not value:
            raise InvalidTrackingQueryException()

        if UUID_PATTERN.match(value):
            return await OrderRepository.get_by_id(value.lower(), session)
        return await OrderRepository.get_latest_by_email(value, session)

    @staticmethod
    async def get_order(order_id: str, session: AsyncSession | Session) -> OrderDTO:
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    @staticmethod
    async def update_status(order_id: str,
                            status: OrderStatus | str,
                            session: AsyncSession | Session) -> OrderDTO:
        """Admin path: set any status from new/processing/shipped/delivered."""
        if not isinstance(status, OrderStatus):
            try:
                status = OrderStatus(status)
            except ValueError:
                raise InvalidOrderStatusException(order_id, str(status))

        updated = await OrderRepository.update_status(order_id, status, session)
        if not updated:
            raise OrderNotFoundException(order_id)
        await session_commit(session)
        logger.info(f"[Order] Order {order_id} status set to {status.value}")
        return await OrderService.get_order(order_id, session)
