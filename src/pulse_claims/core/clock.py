"""Time helpers for day-scoped counters."""

from __future__ import annotations

import time
from collections.abc import Callable

SECONDS_PER_DAY = 86_400

Clock = Callable[[], float]


def day_number(now: float | None = None) -> int:
    """Return the UTC day index (days since the unix epoch)."""
    if now is None:
        now = time.time()
    return int(now // SECONDS_PER_DAY)
