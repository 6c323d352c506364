"""Error taxonomy shared by the claim services and the HTTP layer.

Every chain, store or lookup failure is mapped to one of these classes at the
service boundary. Only ``kind`` and ``message`` ever reach a client; the
original cause travels on ``__cause__`` and is logged server-side.
"""

from __future__ import annotations

from typing import Any


class ClaimError(Exception):
    """Base class for failures surfaced to API clients."""

    kind: str = "claim_error"
    status_code: int = 400
    retryable: bool = False

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_payload(self) -> dict[str, Any]:
        return {"success": False, "error": self.kind, "message": self.message}


class ValidationError(ClaimError):
    """Malformed input. Terminal, never retried."""

    kind = "validation_error"
    status_code = 400


class UnsupportedChainError(ValidationError):
    """Chain id is unknown or has no contract configured."""

    def __init__(self, chain_id: int) -> None:
        super().__init__(f"Unsupported chain: {chain_id}", context={"chain_id": chain_id})
        self.chain_id = chain_id


class RateLimited(ClaimError):
    """Caller exceeded a rate-limit window."""

    kind = "rate_limited"
    status_code = 429

    def __init__(self, message: str, *, retry_after: int, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, context=context)
        self.retry_after = retry_after


class NotEligible(ClaimError):
    """Claimer cannot claim today."""

    kind = "not_eligible"
    status_code = 403

    def __init__(self, reasons: list[str], *, context: dict[str, Any] | None = None) -> None:
        super().__init__(f"Not eligible to claim: {', '.join(reasons)}", context=context)
        self.reasons = reasons

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["reasons"] = list(self.reasons)
        return payload


class UpstreamUnavailable(ClaimError):
    """RPC, store or lookup service is down. Safe to retry."""

    kind = "upstream_unavailable"
    status_code = 503
    retryable = True


class SignerConfigurationError(UpstreamUnavailable):
    """Voucher signing key is missing or unusable."""

    status_code = 500


class ReceiptNotFound(ClaimError):
    """No receipt for the hash yet. Usually still pending."""

    kind = "not_found"
    status_code = 404
    retryable = True


class OnChainFailure(ClaimError):
    """Transaction was mined but reverted."""

    kind = "failed_on_chain"
    status_code = 400

    def __init__(
        self,
        message: str,
        *,
        revert_reason: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.revert_reason = revert_reason

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.revert_reason:
            payload["revertReason"] = self.revert_reason
        return payload


class VerificationMismatch(ClaimError):
    """Transaction targets the wrong contract or function."""

    WRONG_CONTRACT = "wrong_contract"
    WRONG_FUNCTION = "wrong_function"

    status_code = 400

    def __init__(self, step: str, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, context=context)
        self.step = step
        self.kind = step
