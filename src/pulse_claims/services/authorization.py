"""Claim authorization: validate, rate-limit, gate on eligibility, issue."""

from __future__ import annotations

import logging
import time

from pulse_claims.chain.client import ChainClientPool
from pulse_claims.core.clock import Clock
from pulse_claims.core.errors import NotEligible, ValidationError
from pulse_claims.core.validation import normalize_address, require_positive_int
from pulse_claims.services.eligibility import EligibilityEvaluator
from pulse_claims.services.issuer import ClaimVoucher, VoucherIssuer
from pulse_claims.services.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Orchestrates the evaluator and the issuer to hand out vouchers."""

    def __init__(
        self,
        *,
        chains: ChainClientPool,
        evaluator: EligibilityEvaluator,
        issuer: VoucherIssuer,
        ip_limiter: RateLimiter,
        claimer_limiter: RateLimiter,
        max_deadline_seconds: int,
        clock: Clock = time.time,
    ) -> None:
        self._chains = chains
        self._evaluator = evaluator
        self._issuer = issuer
        self._ip_limiter = ip_limiter
        self._claimer_limiter = claimer_limiter
        self._max_deadline_seconds = max_deadline_seconds
        self._clock = clock

    def _check_deadline(self, deadline: int) -> None:
        now = int(self._clock())
        if deadline <= now:
            raise ValidationError("Invalid deadline: must be in the future")
        if deadline - now > self._max_deadline_seconds:
            raise ValidationError(
                f"Invalid deadline: must be within {self._max_deadline_seconds} seconds"
            )

    async def authorize(
        self,
        *,
        claimer: str,
        social_id: int,
        deadline: int,
        chain_id: int,
        network_identity: str,
    ) -> ClaimVoucher:
        claimer = normalize_address(claimer, field="claimer")
        require_positive_int(social_id, field="socialId")
        require_positive_int(deadline, field="deadline")
        require_positive_int(chain_id, field="chainId")
        self._check_deadline(deadline)
        self._chains.get(chain_id)

        await self._ip_limiter.enforce(network_identity)
        await self._claimer_limiter.enforce(claimer)

        result = await self._evaluator.evaluate(claimer, social_id, chain_id)
        if not result.can_claim:
            logger.info(
                "Voucher refused: %s",
                ", ".join(result.reasons),
                extra={"operation": "authorize", "claimer": claimer, "social_id": social_id, "chain_id": chain_id},
            )
            raise NotEligible(result.reasons, context={"claimer": claimer, "chain_id": chain_id})

        return await self._issuer.issue(claimer, social_id, deadline, chain_id)
