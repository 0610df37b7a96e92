"""KVStore: per-entry TTLs plus a recurring whole-store clear."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable, MutableMapping, Sequence
from typing import Any, Generic, TypeVar

from memory_kv.delay import Delay
from memory_kv.models import BulkOperationError, DelayError, Entry

T = TypeVar("T")

Clock = Callable[[], float]

DEFAULT_STORE_TTL = 5 * 60.0


class KVStore(Generic[T]):
    """A dumb in-memory key/value store that empties itself every ``store_ttl`` seconds.

    Entries written with a ``ttl`` also expire on their own; expired entries
    are only dropped when a ``get`` notices them. The whole-store clear is
    driven by a single outstanding ``delay`` handle that re-arms itself each
    time it fires. An infinite ``store_ttl`` turns the clear off.

    Not thread-safe: meant to live on one event loop.
    """

    def __init__(
        self,
        *,
        delay: Delay,
        clock: Clock,
        store_ttl: float = DEFAULT_STORE_TTL,
        store: MutableMapping[str, Entry] | None = None,
        logger: logging.Logger | None = None,
    ):
        self._delay = delay
        self._clock = clock
        self._ttl = store_ttl
        self._store: MutableMapping[str, Entry] = store if store is not None else {}
        self._logger = logger or logging.getLogger(__name__)
        self._current_delay: asyncio.Future[None] | None = None
        self._closed = False
        self._renew()

    @property
    def store(self) -> MutableMapping[str, Entry]:
        """The backing mapping, exposed for inspection and seeding."""
        return self._store

    @property
    def store_ttl(self) -> float:
        return self._ttl

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Single-key operations
    # ------------------------------------------------------------------

    async def set(self, key: str, value: T | None, ttl: float | None = None) -> None:
        """Store ``value`` under ``key``, valid for ``ttl`` seconds (forever if omitted).

        Any previous entry for ``key`` is overwritten.
        """
        lifetime = math.inf if ttl is None else ttl
        self._store[key] = Entry(data=value, expires_at=self._clock() + lifetime)

    async def get(self, key: str) -> T | None:
        """Return the value stored at ``key``, or ``None`` if missing or expired.

        An expired entry is removed as a side effect.
        """
        entry = self._store.get(key)
        if entry is None:
            return None

        if entry.is_alive(self._clock()):
            return entry.data

        self._store.pop(key, None)
        return None

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    async def bulk_set(
        self,
        keys: Sequence[str],
        values: Sequence[T | None],
        ttls: Sequence[float | None] | None = None,
    ) -> None:
        """Set ``keys[i]`` to ``values[i]`` with ``ttls[i]`` for every index.

        Missing trailing values are stored as ``None``; missing trailing ttls
        mean no ttl. Each write is independent, there is no atomicity.
        """
        ttls = ttls or ()
        if len(values) > len(keys) or len(ttls) > len(keys):
            raise ValueError(
                f"bulk_set got {len(keys)} keys but {len(values)} values "
                f"and {len(ttls)} ttls"
            )

        await self._join(
            "bulk_set",
            [
                self.set(
                    key,
                    values[index] if index < len(values) else None,
                    ttls[index] if index < len(ttls) else None,
                )
                for index, key in enumerate(keys)
            ],
        )

    async def bulk_get(self, keys: Sequence[str]) -> list[T | None]:
        """Return the value of each key, in the order the keys were given."""
        return await self._join("bulk_get", [self.get(key) for key in keys])

    async def bulk_delete(self, keys: Sequence[str]) -> None:
        await self._join("bulk_delete", [self.delete(key) for key in keys])

    async def _join(self, operation: str, calls: list[Awaitable[Any]]) -> list[Any]:
        """Await every call, then fail as a whole if any of them failed."""
        outcomes = await asyncio.gather(*(_settle(call) for call in calls))

        errors = {index: exc for index, (_, exc) in enumerate(outcomes) if exc is not None}
        results = [result for result, _ in outcomes]
        if errors:
            raise BulkOperationError(operation, errors, results)
        return results

    # ------------------------------------------------------------------
    # Clear cycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Cancel the pending clear and stop the cycle. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._cancel_current_delay()
        self._logger.debug("Store closed, clear cycle stopped.")

    async def __aenter__(self) -> KVStore[T]:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    def _clear(self) -> None:
        self._store.clear()
        self._current_delay = None
        self._logger.debug("Store cleared, next clear in %s s.", self._ttl)
        self._renew()

    def _renew(self) -> None:
        self._cancel_current_delay()

        handle = self._delay.create(self._ttl)
        self._current_delay = handle
        handle.add_done_callback(self._on_delay_done)

    def _cancel_current_delay(self) -> None:
        handle, self._current_delay = self._current_delay, None
        if handle is None:
            return
        try:
            self._delay.clear(handle)
        except DelayError as exc:
            self._logger.debug("No delay to cancel: %s", exc)

    def _on_delay_done(self, handle: asyncio.Future[None]) -> None:
        if handle.cancelled():
            self._logger.debug("Delay cancelled.")
            return
        # Superseded or closed: another handle owns the cycle now.
        if handle is not self._current_delay:
            return

        exc = handle.exception()
        if exc is not None:
            self._current_delay = None
            self._logger.debug("Delay failed, clear cycle stopped: %s", exc)
            return

        self._clear()


async def _settle(call: Awaitable[Any]) -> tuple[Any, Exception | None]:
    try:
        return await call, None
    except Exception as exc:
        return None, exc
