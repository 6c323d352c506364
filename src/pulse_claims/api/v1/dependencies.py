"""Shared API dependencies for the claim endpoints."""

from typing import Annotated

from fastapi import Depends, Request

from pulse_claims.services.context import ClaimsContext

UNKNOWN_NETWORK_IDENTITY = "unknown"


def get_claims_context(request: Request) -> ClaimsContext:
    """Return the context built at startup.

    Args:
        request: Incoming request

    Returns:
        The application's ClaimsContext
    """
    return request.app.state.claims_context


def get_network_identity(request: Request) -> str:
    """Identify the caller for rate limiting.

    Uses the first ``X-Forwarded-For`` hop when the service runs behind a
    proxy, otherwise the socket peer address.

    Args:
        request: Incoming request

    Returns:
        Caller address string, or ``"unknown"`` when none is available
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_NETWORK_IDENTITY


ClaimsContextDep = Annotated[ClaimsContext, Depends(get_claims_context)]
NetworkIdentityDep = Annotated[str, Depends(get_network_identity)]
