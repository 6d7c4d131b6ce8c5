"""Timezone-aware clock utilities.

All wall-clock timestamps in recursive-refine are UTC-aware.  This module is
also the single source of elapsed-time measurement so tests can patch it.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def monotonic() -> float:
    return time.monotonic()


def elapsed_ms(start: float) -> int:
    """Whole milliseconds elapsed since *start* (a ``monotonic()`` reading)."""
    return int((monotonic() - start) * 1000)
