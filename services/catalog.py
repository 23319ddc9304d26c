import asyncio
import logging
import time
from typing import Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from db import get_db_session, SessionFactory
from exceptions.catalog import CatalogFetchException
from exceptions.product import ProductNotFoundException
from models.catalog import FilterKey, CatalogPageDTO
from models.product import ProductDTO
from repositories.product import ProductRepository

logger = logging.getLogger(__name__)

PageFetcher = Callable[[FilterKey, int], Awaitable[CatalogPageDTO]]
CacheKey = tuple[FilterKey, int]


class CatalogService:

    @staticmethod
    async def fetch_page(filter_key: FilterKey,
                         cursor: int,
                         session: AsyncSession | Session,
                         page_size: int = config.CATALOG_PAGE_SIZE) -> CatalogPageDTO:
        """
        Fetch page `cursor` (zero-based) of the products matching filter_key.

        has_more is true iff the page came back full, so a catalog whose size
        is a multiple of page_size ends with one empty page.
        """
        products, total_count = await ProductRepository.get_page(
            filter_key, cursor * page_size, page_size, session
        )
        return CatalogPageDTO(
            products=products,
            has_more=len(products) == page_size,
            total_count=total_count,
            cursor=cursor
        )

    @staticmethod
    def make_fetcher(session_factory: SessionFactory = get_db_session,
                     page_size: int = config.CATALOG_PAGE_SIZE) -> PageFetcher:
        """Bind fetch_page to a session factory, converting data service errors into CatalogFetchException."""

        async def fetch(filter_key: FilterKey, cursor: int) -> CatalogPageDTO:
            try:
                async with session_factory() as session:
                    return await CatalogService.fetch_page(filter_key, cursor, session, page_size)
            except SQLAlchemyError as e:
                raise CatalogFetchException(filter_key.search, filter_key.category, cursor, str(e)) from e

        return fetch

    @staticmethod
    async def get_product(product_id: str, session: AsyncSession | Session) -> ProductDTO:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    @staticmethod
    async def get_products(product_ids: list[str], session: AsyncSession | Session) -> list[ProductDTO]:
        """Resolve ids (recently viewed, wishlist) keeping their order; deleted products are skipped."""
        products = await ProductRepository.get_by_ids(product_ids, session)
        return [products[product_id] for product_id in product_ids if product_id in products]


class CatalogQueryCache:
    """
    Page cache keyed by (filter key, cursor).

    - A page fetched less than stale_seconds ago is served from cache.
    - Concurrent requests for the same key share one fetch.
    - Failed fetches are not cached.
    """

    def __init__(self,
                 fetcher: PageFetcher,
                 stale_seconds: float = config.CATALOG_STALE_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.fetcher = fetcher
        self.stale_seconds = stale_seconds
        self.clock = clock
        self._entries: dict[CacheKey, tuple[float, CatalogPageDTO]] = {}
        self._in_flight: dict[CacheKey, asyncio.Future] = {}

    def get_fresh(self, filter_key: FilterKey, cursor: int) -> CatalogPageDTO | None:
        entry = self._entries.get((filter_key, cursor))
        if entry is None:
            return None
        fetched_at, page = entry
        if self.clock() - fetched_at >= self.stale_seconds:
            return None
        return page

    def is_in_flight(self, filter_key: FilterKey, cursor: int) -> bool:
        return (filter_key, cursor) in self._in_flight

    async def fetch(self, filter_key: FilterKey, cursor: int) -> CatalogPageDTO:
        page = self.get_fresh(filter_key, cursor)
        if page is not None:
            return page

        key = (filter_key, cursor)
        future = self._in_flight.get(key)
        if future is None:
            future = asyncio.ensure_future(self._load(key))
            self._in_flight[key] = future
        else:
            logger.debug(f"[Catalog] Joining in-flight fetch for cursor {cursor}")
        # A cancelled waiter must not cancel the fetch other waiters share
        return await asyncio.shield(future)

    async def _load(self, key: CacheKey) -> CatalogPageDTO:
        filter_key, cursor = key
        task = asyncio.current_task()
        try:
            page = await self.fetcher(filter_key, cursor)
            # invalidate() unregisters fetches it overtakes; their pages go to waiters only
            if self._in_flight.get(key) is task:
                self._entries[key] = (self.clock(), page)
            else:
                logger.debug(f"[Catalog] Not caching page {cursor} fetched before invalidation")
            return page
        finally:
            if self._in_flight.get(key) is task:
                del self._in_flight[key]

    def invalidate(self, filter_key: FilterKey | None = None) -> None:
        """
        Drop cached pages for filter_key, or every page when None.

        Fetches already in flight for those keys still resolve for their
        waiters but are not cached, and later requests start a new fetch.
        """
        if filter_key is None:
            self._entries.clear()
            self._in_flight.clear()
            return
        for key in [key for key in self._entries if key[0] == filter_key]:
            del self._entries[key]
        for key in [key for key in self._in_flight if key[0] == filter_key]:
            del self._in_flight[key]


class CatalogFeed:
    """
    Infinite-scroll product list for one active filter key.

    Pages are appended strictly in cursor order: only one fetch for the
    next cursor may be in flight. Changing the filter discards accumulated
    pages, and responses that arrive for a previous filter are dropped.
    A failed fetch leaves loaded pages in place and records `error`
    until retry() succeeds. A cancelled load leaves no error and the
    next call fetches the same cursor again.
    """

    def __init__(self,
                 cache: CatalogQueryCache,
                 filter_key: FilterKey | None = None,
                 proximity_margin_px: int = config.CATALOG_PROXIMITY_MARGIN_PX):
        self.cache = cache
        self.filter_key = filter_key or FilterKey.of()
        self.proximity_margin_px = proximity_margin_px
        self.error: CatalogFetchException | None = None
        self.total_count = 0
        self._pages: list[CatalogPageDTO] = []
        self._has_more = True
        self._in_flight_cursor: int | None = None
        self._generation = 0

    @property
    def products(self) -> list[ProductDTO]:
        return [product for page in self._pages for product in page.products]

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def is_loading(self) -> bool:
        return self._in_flight_cursor is not None

    @property
    def next_cursor(self) -> int:
        return len(self._pages)

    def _reset(self) -> None:
        self._generation += 1
        self._pages = []
        self._has_more = True
        self._in_flight_cursor = None
        self.error = None
        self.total_count = 0

    def set_filter(self, filter_key: FilterKey) -> bool:
        """
        Switch the active filter key.

        Returns:
            True if the key changed and the feed restarted from cursor 0
        """
        if filter_key == self.filter_key:
            return False
        logger.debug(f"[Catalog] Filter changed to search='{filter_key.search}', category='{filter_key.category}'")
        self.filter_key = filter_key
        self._reset()
        return True

    async def load_next_page(self) -> bool:
        """
        Fetch and append the next page.

        Returns:
            True if a page was appended; False if nothing was requested
            (no more pages, fetch already in flight), the fetch failed, or
            the response belonged to a filter key that is no longer active
        """
        if self._in_flight_cursor is not None or not self._has_more:
            return False

        cursor = self.next_cursor
        filter_key = self.filter_key
        generation = self._generation
        self._in_flight_cursor = cursor
        self.error = None

        page = None
        error = None
        try:
            page = await self.cache.fetch(filter_key, cursor)
        except CatalogFetchException as e:
            error = e
        except Exception as e:
            error = CatalogFetchException(filter_key.search, filter_key.category, cursor, str(e) or type(e).__name__)
        finally:
            # Also runs on cancellation, so the feed never stays loading
            if generation == self._generation:
                self._in_flight_cursor = None

        if generation != self._generation:
            logger.debug(f"[Catalog] Dropping late page {cursor} for previous filter")
            return False

        if error is not None:
            self.error = error
            logger.warning(f"[Catalog] {error}")
            return False

        self._pages.append(page)
        self._has_more = page.has_more
        self.total_count = page.total_count
        return True

    async def on_proximity(self, distance_to_end_px: float) -> bool:
        """Proximity trigger: request the next page once the list end is within the margin."""
        if distance_to_end_px > self.proximity_margin_px:
            return False
        return await self.load_next_page()

    async def retry(self) -> bool:
        """Repeat the failed fetch; no-op when there is no error."""
        if self.error is None:
            return False
        return await self.load_next_page()

    async def reload(self) -> bool:
        """Drop cached pages for the active filter and start again from cursor 0."""
        self.cache.invalidate(self.filter_key)
        self._reset()
        return await self.load_next_page()
