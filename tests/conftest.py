"""Shared test fixtures."""

from __future__ import annotations

import asyncio

import pytest

from memory_kv.config import Settings
from memory_kv.models import DelayNotFoundError
from memory_kv.store import KVStore


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDelay:
    """Records every create/clear call; delays only fire on resolve_all()."""

    def __init__(self):
        self.created: list[float] = []
        self.cleared: list[asyncio.Future[None]] = []
        self.pending: list[asyncio.Future[None]] = []

    def create(self, duration: float) -> asyncio.Future[None]:
        self.created.append(duration)
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return future

    def clear(self, handle: asyncio.Future[None]) -> None:
        self.cleared.append(handle)
        if handle not in self.pending:
            raise DelayNotFoundError("No pending delay found to clear.")
        self.pending.remove(handle)
        handle.cancel()

    async def resolve_all(self) -> None:
        pending, self.pending = self.pending, []
        for future in pending:
            future.set_result(None)
        # Let the done callbacks run.
        await asyncio.sleep(0)


@pytest.fixture
def settings() -> Settings:
    return Settings(store_ttl_seconds=300.0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def delay() -> FakeDelay:
    return FakeDelay()


@pytest.fixture
def backing() -> dict:
    return {}


@pytest.fixture
async def kv(delay: FakeDelay, clock: FakeClock, backing: dict) -> KVStore:
    return KVStore(delay=delay, clock=clock, store=backing)
