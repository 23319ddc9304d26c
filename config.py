import os
import sys

from dotenv import load_dotenv

from enums.kv_backend import KeyValueBackend

# Load .env but don't override existing environment variables
# This allows test scripts to set values before import
load_dotenv(".env", override=False)


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
        if value < 0:
            raise ValueError(f"{name} must be a non-negative integer")
        return value
    except ValueError as e:
        print(f"\n ERROR: Invalid {name} configuration\n", file=sys.stderr)
        print(f"Reason: {e}", file=sys.stderr)
        print(f"Current value: {raw}\n", file=sys.stderr)
        sys.exit(1)


# Data service
DB_URL = os.environ.get("DB_URL", "sqlite+aiosqlite:///data/storefront.db")

# Persistent key-value bridge
try:
    KV_BACKEND = KeyValueBackend(os.environ.get("KV_BACKEND", KeyValueBackend.MEMORY.value))
except ValueError as e:
    valid_values = [backend.value for backend in KeyValueBackend]
    print(f"\n ERROR: Invalid KV_BACKEND configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(valid_values)}\n", file=sys.stderr)
    sys.exit(1)
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PORT = _int_env("REDIS_PORT", 6379)
REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD")
KV_KEY_PREFIX = os.environ.get("KV_KEY_PREFIX", "storefront:")

# Catalog feed
CATALOG_PAGE_SIZE = _int_env("CATALOG_PAGE_SIZE", 12)
CATALOG_STALE_SECONDS = _int_env("CATALOG_STALE_SECONDS", 60)
CATALOG_PROXIMITY_MARGIN_PX = _int_env("CATALOG_PROXIMITY_MARGIN_PX", 200)

RECENTLY_VIEWED_MAX = _int_env("RECENTLY_VIEWED_MAX", 10)

# Currency fallbacks used until the store config is available
DEFAULT_CURRENCY_SYMBOL = os.environ.get("DEFAULT_CURRENCY_SYMBOL", "₦")
DEFAULT_CURRENCY_CODE = os.environ.get("DEFAULT_CURRENCY_CODE", "NGN")
DEFAULT_COUNTRY = os.environ.get("DEFAULT_COUNTRY", "Nigeria")

# Order hand-off: native messaging deep link falls back to the web link after this delay
HANDOFF_FALLBACK_DELAY_MS = _int_env("HANDOFF_FALLBACK_DELAY_MS", 2500)

LANGUAGE = os.environ.get("LANGUAGE", "en")

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask customer data in logs
LOG_RETENTION_DAYS = _int_env("LOG_RETENTION_DAYS", 7)

# Web API (order tracking)
WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "127.0.0.1")
WEBAPP_PORT = _int_env("WEBAPP_PORT", 8000)
WEB_CORS_ALLOWED_ORIGINS = os.environ.get("WEB_CORS_ALLOWED_ORIGINS", "").split(",") if os.environ.get("WEB_CORS_ALLOWED_ORIGINS") else []  # CORS allowed origins
