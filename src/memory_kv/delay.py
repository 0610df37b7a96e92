"""Cancellable delays on top of the running asyncio loop."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Protocol

from memory_kv.models import DelayNotFoundError


class Delay(Protocol):
    def create(self, duration: float) -> asyncio.Future[None]: ...

    def clear(self, handle: asyncio.Future[None]) -> None: ...


class DelayService:
    """Hands out futures that resolve after a given number of seconds.

    An infinite duration yields a future that only completes when cleared.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(__name__)
        self._pending: dict[asyncio.Future[None], asyncio.TimerHandle | None] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def create(self, duration: float) -> asyncio.Future[None]:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()

        timer = None
        if math.isfinite(duration):
            timer = loop.call_later(max(duration, 0.0), self._resolve, future)

        self._pending[future] = timer
        future.add_done_callback(self._forget)
        self._logger.debug("Delay created (%s s).", duration)
        return future

    def clear(self, handle: asyncio.Future[None]) -> None:
        try:
            timer = self._pending.pop(handle)
        except KeyError:
            raise DelayNotFoundError("No pending delay found to clear.") from None

        if timer is not None:
            timer.cancel()
        handle.cancel()
        self._logger.debug("Delay cleared.")

    def _forget(self, future: asyncio.Future[None]) -> None:
        timer = self._pending.pop(future, None)
        if timer is not None:
            timer.cancel()

    def _resolve(self, future: asyncio.Future[None]) -> None:
        self._pending.pop(future, None)
        if not future.done():
            future.set_result(None)
