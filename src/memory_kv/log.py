"""Logging setup for applications embedding the store."""

from __future__ import annotations

import logging
import sys

from memory_kv.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """Send every record to stdout; the level defaults to ``MEMORY_KV_LOG_LEVEL``."""
    if level is None:
        level = Settings().log_level.upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
