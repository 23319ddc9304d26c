import logging
import uuid
from typing import Callable

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from models.cart import CartLineItemDTO, CartSnapshotDTO, StockProblemDTO
from models.product import ProductDTO
from repositories.product import ProductRepository
from utils.kv_bridge import KeyValueBridge

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "cart"

CartSubscriber = Callable[["CartStore"], None]


class CartStore:
    """
    Single shared shopping cart for the session.

    Construct one instance at application start and hand it to every view
    that shows prices or the cart badge. Views subscribe to be told about
    changes instead of talking to each other.

    Invariants:
    - at most one line item per product id
    - every line quantity is a positive integer
    - totals are folded over the line items on every call

    Every mutation writes the full cart to the key-value bridge before
    returning and then notifies subscribers synchronously, in subscription
    order. Mutations never suspend, so two calls can't interleave.
    """

    def __init__(self, kv_bridge: KeyValueBridge, storage_key: str = CART_STORAGE_KEY):
        self.kv_bridge = kv_bridge
        self.storage_key = storage_key
        self._subscribers: list[CartSubscriber] = []
        self._items: list[CartLineItemDTO] = self._hydrate()

    def _hydrate(self) -> list[CartLineItemDTO]:
        raw = self.kv_bridge.get(self.storage_key)
        if not raw:
            return []
        try:
            snapshot = CartSnapshotDTO.model_validate_json(raw)
        except ValidationError as e:
            # Corrupt or outdated snapshot is treated as an empty cart
            logger.warning(f"[Cart] Discarding unreadable cart snapshot ({e.error_count()} errors)")
            return []
        logger.debug(f"[Cart] Restored {len(snapshot.items)} line items")
        return list(snapshot.items)

    def _persist(self) -> None:
        snapshot = CartSnapshotDTO(items=self._items)
        try:
            self.kv_bridge.set(self.storage_key, snapshot.model_dump_json())
        except Exception:
            # In-memory state stays authoritative for this session
            logger.exception("[Cart] Failed to persist cart snapshot")

    def _notify(self) -> None:
        for subscriber in list(self._subscribers):
            try:
                subscriber(self)
            except Exception:
                logger.exception(f"[Cart] Subscriber {subscriber!r} failed")

    def _commit(self) -> None:
        self._persist()
        self._notify()

    def _index_of(self, product_id: str) -> int | None:
        for index, line in enumerate(self._items):
            if line.product.id == product_id:
                return index
        return None

    def subscribe(self, subscriber: CartSubscriber) -> Callable[[], None]:
        """
        Register a change callback.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    @property
    def items(self) -> list[CartLineItemDTO]:
        return list(self._items)

    def get_item(self, product_id: str) -> CartLineItemDTO | None:
        index = self._index_of(product_id)
        return None if index is None else self._items[index]

    def add_item(self, product: ProductDTO, quantity: int = 1) -> None:
        """
        Add quantity of product, merging into the existing line if present.

        Stock is not checked here; see CartService.add_to_cart.
        """
        if quantity <= 0:
            logger.debug(f"[Cart] Ignoring add of non-positive quantity {quantity} for {product.id}")
            return

        index = self._index_of(product.id)
        if index is None:
            self._items.append(CartLineItemDTO(
                id=str(uuid.uuid4()),
                product=product.model_copy(),
                quantity=quantity
            ))
        else:
            line = self._items[index]
            self._items[index] = line.model_copy(update={'quantity': line.quantity + quantity})
        self._commit()

    def update_quantity(self, product_id: str, new_quantity: int) -> None:
        """Set a line's quantity; a non-positive quantity removes the line."""
        index = self._index_of(product_id)
        if index is None:
            return
        if new_quantity <= 0:
            del self._items[index]
        else:
            self._items[index] = self._items[index].model_copy(update={'quantity': new_quantity})
        self._commit()

    def remove_item(self, product_id: str) -> None:
        index = self._index_of(product_id)
        if index is None:
            return
        del self._items[index]
        self._commit()

    def clear(self) -> None:
        self._items = []
        self._commit()

    def get_total_items(self) -> int:
        return sum(line.quantity for line in self._items)

    def get_total_price(self) -> float:
        return sum((line.product.price * line.quantity for line in self._items), 0.0)


class CartService:

    @staticmethod
    async def add_to_cart(cart: CartStore,
                          product_id: str,
                          quantity: int,
                          session: AsyncSession | Session) -> tuple[bool, str, dict]:
        """
        Adds product to cart with stock validation.

        The existing line quantity counts against the product's on-hand
        quantity. On rejection the cart is left unchanged.

        Returns:
            (success, message_key, format_args)
            - success: Whether the product was added
            - message_key: Localization key for the notice
            - format_args: Dict with format arguments for the notice
        """
        if quantity <= 0:
            return False, "add_to_cart_invalid_quantity", {}

        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            return False, "add_to_cart_product_not_found", {}

        if not product.in_stock or product.quantity <= 0:
            return False, "add_to_cart_out_of_stock", {"product_name": product.name}

        line = cart.get_item(product.id)
        in_cart = line.quantity if line else 0
        if in_cart + quantity > product.quantity:
            logger.info(f"[Cart] Rejected add of {quantity} x {product.id}: "
                         f"{in_cart} in cart, {product.quantity} available")
            return False, "add_to_cart_stock_exceeded", {
                "product_name": product.name,
                "available": product.quantity,
                "in_cart": in_cart
            }

        cart.add_item(product, quantity)

        if quantity == 1:
            return True, "item_added_to_cart", {"product_name": product.name}
        return True, "items_added_to_cart", {"product_name": product.name, "quantity": quantity}

    @staticmethod
    async def validate_cart_stock(cart: CartStore, session: AsyncSession | Session) -> list[StockProblemDTO]:
        """
        Compare every line against the product's current on-hand quantity.

        This is an opportunistic check, not a reservation: stock can change
        between this call and the inventory decrement after the order.

        Returns:
            One StockProblemDTO per line that exceeds available stock
        """
        lines = cart.items
        products = await ProductRepository.get_by_ids([line.product.id for line in lines], session)

        problems = []
        for line in lines:
            product = products.get(line.product.id)
            if product is None or not product.in_stock:
                available = 0
            else:
                available = product.quantity
            if line.quantity > available:
                problems.append(StockProblemDTO(
                    product_id=line.product.id,
                    product_name=line.product.name,
                    requested=line.quantity,
                    available=available
                ))
        return problems
