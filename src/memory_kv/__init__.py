"""In-memory key/value store with per-entry TTLs and a periodic full clear."""

from memory_kv.delay import DelayService
from memory_kv.dependencies import init_kv, kv_store_lifespan
from memory_kv.log import configure_logging
from memory_kv.models import (
    BulkOperationError,
    DelayError,
    DelayNotFoundError,
    Entry,
    KVStoreError,
)
from memory_kv.store import DEFAULT_STORE_TTL, KVStore

__all__ = [
    "DEFAULT_STORE_TTL",
    "BulkOperationError",
    "DelayError",
    "DelayNotFoundError",
    "DelayService",
    "Entry",
    "KVStore",
    "KVStoreError",
    "configure_logging",
    "init_kv",
    "kv_store_lifespan",
]
