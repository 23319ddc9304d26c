"""
Persistent Key-Value Bridge

Thin synchronous string store used to hydrate and save client-side state
(cart snapshot, guest id, guest likes, recently viewed products) across
reloads.

Backends:
- memory: process-local dict (tests, single-process use)
- redis: synchronous Redis client, keys namespaced with config.KV_KEY_PREFIX

All operations are synchronous so that cart mutations never suspend.
"""

import logging
from abc import ABC, abstractmethod

from redis import Redis
from redis.exceptions import RedisError

import config
from enums.kv_backend import KeyValueBackend

logger = logging.getLogger(__name__)


class KeyValueBridge(ABC):

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored string, or None when absent or unreadable."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store the string under key, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""


class MemoryKeyValueBridge(KeyValueBridge):

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class RedisKeyValueBridge(KeyValueBridge):

    def __init__(self, redis: Redis, prefix: str = ""):
        """
        Args:
            redis: Synchronous Redis client. Values are decoded to str if the
                   client was created without decode_responses.
            prefix: Namespace prepended to every key
        """
        self.redis = redis
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> str | None:
        try:
            value = self.redis.get(self._key(key))
            if isinstance(value, bytes):
                value = value.decode("utf-8")
        except (RedisError, UnicodeDecodeError) as e:
            # Unreadable storage is treated as absent data
            logger.warning(f"[KV] Failed to read '{key}': {e}")
            return None
        return value

    def set(self, key: str, value: str) -> None:
        self.redis.set(self._key(key), value)

    def delete(self, key: str) -> None:
        self.redis.delete(self._key(key))


def create_kv_bridge() -> KeyValueBridge:
    """Build the key-value bridge selected by config.KV_BACKEND."""
    if config.KV_BACKEND == KeyValueBackend.REDIS:
        redis = Redis(
            host=config.REDIS_HOST,
            port=config.REDIS_PORT,
            password=config.REDIS_PASSWORD,
            decode_responses=True
        )
        logger.info(f"[KV] Using Redis key-value bridge at {config.REDIS_HOST}:{config.REDIS_PORT}")
        return RedisKeyValueBridge(redis, prefix=config.KV_KEY_PREFIX)
    logger.info("[KV] Using in-memory key-value bridge")
    return MemoryKeyValueBridge()
