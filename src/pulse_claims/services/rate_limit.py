"""Rate limiting, daily claim counters and the processed-transaction ledger.

Two independent mechanisms share the store:

* ``RateLimiter`` is a fixed-window abuse limiter keyed by an identifier
  (network identity or claimer address).
* ``DailyClaimCounter`` counts verified settlements per UTC day and chain.
  Only the settlement confirmer increments it; everything else reads.

Both rely on the store's single atomic increment-with-TTL primitive rather
than read-modify-write in application code.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from pulse_claims.core.clock import SECONDS_PER_DAY, Clock, day_number
from pulse_claims.core.errors import RateLimited
from pulse_claims.services.store import KeyValueStore

logger = logging.getLogger(__name__)

_DAILY_COUNTER_TTL_SECONDS = 2 * SECONDS_PER_DAY
_PROCESSED_TX_TTL_SECONDS = 2 * SECONDS_PER_DAY


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    count: int
    remaining: int


class RateLimiter:
    """Fixed-window request limiter."""

    def __init__(self, store: KeyValueStore, name: str, *, limit: int, window_seconds: int) -> None:
        self._store = store
        self.name = name
        self.limit = limit
        self.window_seconds = window_seconds

    def _key(self, identifier: str) -> str:
        return self._store.key("ratelimit", self.name, identifier.lower())

    async def hit(self, identifier: str) -> RateLimitResult:
        """Count one request for ``identifier`` and report whether it fits."""
        count = await self._store.incr_with_ttl(self._key(identifier), self.window_seconds)
        return RateLimitResult(
            allowed=count <= self.limit,
            count=count,
            remaining=max(0, self.limit - count),
        )

    async def enforce(self, identifier: str) -> RateLimitResult:
        """Like ``hit`` but raise ``RateLimited`` once the window is exhausted."""
        result = await self.hit(identifier)
        if not result.allowed:
            remaining = await self._store.ttl(self._key(identifier))
            logger.info(
                "Rate limit %s exceeded",
                self.name,
                extra={"operation": "rate_limit", "limiter": self.name, "identifier": identifier},
            )
            raise RateLimited(
                "Too many requests",
                retry_after=remaining if remaining > 0 else self.window_seconds,
                context={"limiter": self.name, "identifier": identifier},
            )
        return result


class DailyClaimCounter:
    """Per-chain count of verified claims for the current UTC day."""

    def __init__(self, store: KeyValueStore, *, limit: int, clock: Clock = time.time) -> None:
        self._store = store
        self.limit = limit
        self._clock = clock

    def today(self) -> int:
        return day_number(self._clock())

    def key(self, chain_id: int, day: int | None = None) -> str:
        return self._store.key("claims", "daily", chain_id, self.today() if day is None else day)

    async def current(self, chain_id: int) -> int:
        return await self._store.get_int(self.key(chain_id))

    async def increment(self, chain_id: int) -> int:
        return await self._store.incr_with_ttl(self.key(chain_id), _DAILY_COUNTER_TTL_SECONDS)

    def is_allowed(self, count: int) -> bool:
        return count <= self.limit


class ProcessedTransactionLedger:
    """Remembers which transaction hashes already advanced the counter."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def key(self, chain_id: int, tx_hash: str) -> str:
        return self._store.key("claims", "tx", chain_id, tx_hash.lower())

    async def mark_processed(self, chain_id: int, tx_hash: str) -> bool:
        """Return True the first time a hash is seen, False on every repeat."""
        return await self._store.set_if_absent(self.key(chain_id, tx_hash), _PROCESSED_TX_TTL_SECONDS)
