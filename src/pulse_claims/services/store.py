"""Key-value store handle shared by the rate limiters and daily counters.

All shared state lives in Redis so every process instance sees the same
counters. The store exposes only the atomic primitives the services need;
Redis errors are re-raised as ``UpstreamUnavailable``.
"""

from __future__ import annotations

import logging
from typing import Any

import redis.asyncio as redis_async
from redis.exceptions import RedisError

from pulse_claims.core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Thin async wrapper around a Redis client with namespaced keys."""

    def __init__(self, client: Any, *, prefix: str = "pulse") -> None:
        self._redis = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, *, prefix: str = "pulse") -> KeyValueStore:
        return cls(redis_async.from_url(url, decode_responses=True), prefix=prefix)

    def key(self, *parts: object) -> str:
        return ":".join([self._prefix, *(str(part) for part in parts)])

    async def incr_with_ttl(self, key: str, ttl_seconds: int) -> int:
        """Increment ``key`` and return the new value in one transaction.

        The key is created with ``ttl_seconds`` on first use; later increments
        keep the original expiry, so the window is anchored at the first hit.
        """
        try:
            pipe = self._redis.pipeline(transaction=True)
            pipe.set(key, 0, ex=ttl_seconds, nx=True)
            pipe.incr(key)
            _, count = await pipe.execute()
        except RedisError as exc:
            logger.error("Store increment failed: %s", exc, extra={"operation": "incr_with_ttl", "key": key})
            raise UpstreamUnavailable("Counter store unavailable") from exc
        return int(count)

    async def get_int(self, key: str) -> int:
        try:
            value = await self._redis.get(key)
        except RedisError as exc:
            logger.error("Store read failed: %s", exc, extra={"operation": "get_int", "key": key})
            raise UpstreamUnavailable("Counter store unavailable") from exc
        return int(value or 0)

    async def set_if_absent(self, key: str, ttl_seconds: int, value: str = "1") -> bool:
        """Create ``key`` unless it exists. Returns True when this call created it."""
        try:
            created = await self._redis.set(key, value, ex=ttl_seconds, nx=True)
        except RedisError as exc:
            logger.error("Store write failed: %s", exc, extra={"operation": "set_if_absent", "key": key})
            raise UpstreamUnavailable("Counter store unavailable") from exc
        return bool(created)

    async def ttl(self, key: str) -> int:
        try:
            remaining = await self._redis.ttl(key)
        except RedisError as exc:
            raise UpstreamUnavailable("Counter store unavailable") from exc
        return int(remaining)

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except RedisError as exc:
            logger.warning("Store ping failed: %s", exc)
            return False

    async def close(self) -> None:
        await self._redis.aclose()
