"""Bootstrap helpers: settings, store factory and FastAPI wiring."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, MutableMapping
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

from fastapi import FastAPI, Request

from memory_kv.config import Settings
from memory_kv.delay import Delay, DelayService
from memory_kv.models import Entry
from memory_kv.store import Clock, KVStore

logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    return Settings()


async def init_kv(
    settings: Settings | None = None,
    *,
    store: MutableMapping[str, Entry] | None = None,
    logger: logging.Logger | None = None,
    delay: Delay | None = None,
    clock: Clock | None = None,
) -> KVStore[Any]:
    """Build a KVStore with its clear cycle armed.

    Anything not passed in falls back to the settings TTL, an empty dict,
    each component's module logger, a fresh DelayService and ``time.monotonic``.
    Must run inside an event loop since arming the cycle creates a delay.
    """
    if settings is None:
        settings = get_settings()
    log = logger or logging.getLogger(__name__)

    kv: KVStore[Any] = KVStore(
        store_ttl=settings.store_ttl_seconds,
        store=store,
        logger=logger,
        delay=delay or DelayService(logger=logger),
        clock=clock or time.monotonic,
    )
    log.info("Store initialized (store_ttl=%s s).", settings.store_ttl_seconds)
    return kv


@asynccontextmanager
async def kv_store_lifespan(
    settings: Settings | None = None, **overrides: Any
) -> AsyncIterator[KVStore[Any]]:
    """Yield an initialized store and stop its clear cycle on exit."""
    kv = await init_kv(settings, **overrides)
    try:
        yield kv
    finally:
        kv.close()


# ---------------------------------------------------------------------------
# FastAPI
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = getattr(app.state, "settings", None)
    async with kv_store_lifespan(settings) as kv:
        app.state.kv = kv
        yield
    logger.info("Store closed")


def get_kv_store(request: Request) -> KVStore[Any]:
    return request.app.state.kv
