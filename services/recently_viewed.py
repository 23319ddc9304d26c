import logging
import time
from typing import Callable

from pydantic import TypeAdapter, ValidationError

import config
from models.recently_viewed import RecentlyViewedEntryDTO
from utils.kv_bridge import KeyValueBridge

logger = logging.getLogger(__name__)

RECENTLY_VIEWED_KEY = "recently-viewed-products"

_entries_adapter = TypeAdapter(list[RecentlyViewedEntryDTO])


class RecentlyViewedService:
    """Most-recent-first list of viewed product ids, de-duplicated and bounded."""

    def __init__(self,
                 kv_bridge: KeyValueBridge,
                 max_items: int = config.RECENTLY_VIEWED_MAX,
                 clock: Callable[[], float] = time.time):
        self.kv_bridge = kv_bridge
        self.max_items = max_items
        self.clock = clock

    def _read(self) -> list[RecentlyViewedEntryDTO]:
        raw = self.kv_bridge.get(RECENTLY_VIEWED_KEY)
        if not raw:
            return []
        try:
            return _entries_adapter.validate_json(raw)
        except ValidationError:
            logger.warning("[RecentlyViewed] Discarding unreadable list")
            return []

    def _write(self, entries: list[RecentlyViewedEntryDTO]) -> None:
        try:
            self.kv_bridge.set(RECENTLY_VIEWED_KEY, _entries_adapter.dump_json(entries).decode("utf-8"))
        except Exception:
            logger.exception("[RecentlyViewed] Failed to persist list")

    def product_ids(self) -> list[str]:
        return [entry.product_id for entry in self._read()]

    def add(self, product_id: str) -> None:
        entries = [entry for entry in self._read() if entry.product_id != product_id]
        entries.insert(0, RecentlyViewedEntryDTO(product_id=product_id, viewed_at=int(self.clock() * 1000)))
        self._write(entries[:self.max_items])

    def remove(self, product_id: str) -> None:
        self._write([entry for entry in self._read() if entry.product_id != product_id])

    def clear(self) -> None:
        self._write([])
