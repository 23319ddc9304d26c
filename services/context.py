import logging

from db import get_db_session, SessionFactory
from models.catalog import FilterKey
from models.order import CustomerDetailsDTO, PlacedOrderDTO
from services.cart import CartStore, CartService
from services.catalog import CatalogService, CatalogQueryCache, CatalogFeed
from services.like import LikeReconciler
from services.order import OrderService
from services.pricing import CurrencyService
from services.recently_viewed import RecentlyViewedService
from utils.kv_bridge import KeyValueBridge, create_kv_bridge

logger = logging.getLogger(__name__)


class StorefrontContext:
    """
    Session-wide state, built once at application start and passed to views.

    Holds the single CartStore, the catalog page cache, the like reconciler,
    currency settings and the recently viewed list, all sharing one
    key-value bridge and one session factory.
    """

    def __init__(self,
                 kv_bridge: KeyValueBridge,
                 session_factory: SessionFactory = get_db_session,
                 user_id: str | None = None,
                 catalog_cache: CatalogQueryCache | None = None):
        self.kv_bridge = kv_bridge
        self.session_factory = session_factory
        self.cart = CartStore(kv_bridge)
        self.currency = CurrencyService(session_factory)
        self.catalog_cache = catalog_cache or CatalogQueryCache(CatalogService.make_fetcher(session_factory))
        self.likes = LikeReconciler(kv_bridge, session_factory, user_id=user_id)
        self.recently_viewed = RecentlyViewedService(kv_bridge)
        # Like counts are part of cached product pages
        self.likes.subscribe(lambda product_id: self.catalog_cache.invalidate())

    @classmethod
    def create(cls, user_id: str | None = None) -> "StorefrontContext":
        """Build the context from config (key-value backend, database)."""
        return cls(create_kv_bridge(), user_id=user_id)

    def new_feed(self, filter_key: FilterKey | None = None) -> CatalogFeed:
        return CatalogFeed(self.catalog_cache, filter_key)

    async def add_to_cart(self, product_id: str, quantity: int = 1) -> tuple[bool, str, dict]:
        async with self.session_factory() as session:
            return await CartService.add_to_cart(self.cart, product_id, quantity, session)

    async def place_order(self, customer: CustomerDetailsDTO) -> PlacedOrderDTO:
        await self.currency.load()
        async with self.session_factory() as session:
            placed = await OrderService.place_order(self.cart, customer, session, self.currency)
        # Stock levels shown in the catalog changed
        self.catalog_cache.invalidate()
        if not placed.inventory_updated:
            logger.warning(f"[Order] Order {placed.order.id} placed without inventory update")
        return placed
