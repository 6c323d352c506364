"""Read-only lookups against the social activity store and reputation service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from pulse_claims.core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_NOT_FOUND = 404


@dataclass(frozen=True)
class SocialActivity:
    """Daily social action facts for one address on one chain."""

    last_action_day: int
    current_streak: int

    def performed_on(self, day: int) -> bool:
        return self.last_action_day == day


def _build_client(base_url: str, timeout_seconds: float, headers: dict[str, str] | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(timeout_seconds),
        headers=headers,
    )


class SocialActivityClient:
    """Client for the sync store's per-address GM statistics."""

    def __init__(
        self,
        base_url: str | None,
        *,
        timeout_seconds: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url
        self._client = client
        if self._client is None and base_url:
            self._client = _build_client(base_url, timeout_seconds)

    async def get_activity(self, address: str, chain_id: int) -> SocialActivity:
        if self._client is None:
            raise UpstreamUnavailable("Social activity lookup is not configured")

        context = {"operation": "social_activity", "address": address, "chain_id": chain_id}
        try:
            response = await self._client.get(
                "/gm/stats",
                params={"address": address, "chainId": chain_id},
            )
            if response.status_code == HTTP_NOT_FOUND:
                return SocialActivity(last_action_day=0, current_streak=0)
            if response.status_code != HTTP_OK:
                raise UpstreamUnavailable(
                    f"Social activity lookup responded with {response.status_code}",
                    context=context,
                )
            payload: dict[str, Any] = response.json()
            return SocialActivity(
                last_action_day=int(payload.get("lastGmDay") or 0),
                current_streak=int(payload.get("currentStreak") or 0),
            )
        except httpx.HTTPError as exc:
            logger.warning("Social activity lookup failed: %s", exc, extra=context)
            raise UpstreamUnavailable("Social activity lookup unavailable", context=context) from exc
        except (ValueError, TypeError, AttributeError) as exc:
            logger.warning("Social activity lookup returned a malformed payload: %s", exc, extra=context)
            raise UpstreamUnavailable("Social activity lookup unavailable", context=context) from exc

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()


class ReputationClient:
    """Client for per-identity reputation scores.

    Returns ``None`` when the service is not configured or does not know the
    identity; callers treat an unknown score as below any threshold.
    """

    def __init__(
        self,
        base_url: str | None,
        *,
        api_key: str | None = None,
        timeout_seconds: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url
        self._client = client
        if self._client is None and base_url:
            headers = {"x-api-key": api_key} if api_key else None
            self._client = _build_client(base_url, timeout_seconds, headers)

    async def get_score(self, social_id: int) -> float | None:
        if self._client is None:
            return None

        context = {"operation": "reputation", "social_id": social_id}
        try:
            response = await self._client.get("/score", params={"fid": social_id})
            if response.status_code != HTTP_OK:
                raise UpstreamUnavailable(
                    f"Reputation lookup responded with {response.status_code}",
                    context=context,
                )
            payload: dict[str, Any] = response.json()
            for user in payload.get("users") or []:
                if int(user.get("fid", 0)) == social_id:
                    return float(user.get("score") or 0.0)
        except httpx.HTTPError as exc:
            logger.warning("Reputation lookup failed: %s", exc, extra=context)
            raise UpstreamUnavailable("Reputation lookup unavailable", context=context) from exc
        except (ValueError, TypeError, AttributeError) as exc:
            logger.warning("Reputation lookup returned a malformed payload: %s", exc, extra=context)
            raise UpstreamUnavailable("Reputation lookup unavailable", context=context) from exc
        return None

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
