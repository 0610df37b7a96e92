"""Stored entry schema and the error hierarchy."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class KVStoreError(Exception):
    """Base exception for memory-kv."""


class DelayError(KVStoreError):
    """Raised when the delay primitive cannot honour a request."""


class DelayNotFoundError(DelayError):
    """Raised when clearing a delay that is not pending anymore."""


class BulkOperationError(KVStoreError):
    """Raised once every member of a bulk operation has completed and some failed.

    ``errors`` maps the input index of each failed member to its exception.
    ``results`` holds the per-index outcome of the members that succeeded
    (``None`` at failed positions) for operations that produce values.
    """

    def __init__(
        self,
        operation: str,
        errors: dict[int, BaseException],
        results: list[Any] | None = None,
    ):
        self.operation = operation
        self.errors = errors
        self.results = results
        indexes = ", ".join(str(i) for i in sorted(errors))
        super().__init__(
            f"{operation} failed for {len(errors)} key(s) at index(es): {indexes}"
        )


# ---------------------------------------------------------------------------
# Store entries
# ---------------------------------------------------------------------------

class Entry(BaseModel):
    """A stored value and the absolute instant after which it is stale."""

    data: Any = None
    # int kept as int so nanosecond clocks compare exactly
    expires_at: int | float = math.inf

    def is_alive(self, now: float) -> bool:
        """Alive up to and including the expiry instant, gone strictly after it."""
        return now <= self.expires_at
