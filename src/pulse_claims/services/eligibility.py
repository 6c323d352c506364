"""Claim eligibility evaluation.

``decide`` is the pure rule over an ``EligibilitySnapshot``.
``EligibilityEvaluator`` gathers the facts for a snapshot from the contract,
the daily counter and the social lookups; it never writes anything.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from pulse_claims.chain.client import ChainClientPool
from pulse_claims.core.validation import normalize_address, require_positive_int
from pulse_claims.services.rate_limit import DailyClaimCounter
from pulse_claims.services.social import ReputationClient, SocialActivityClient

logger = logging.getLogger(__name__)

REASON_BLACKLISTED = "blacklisted"
REASON_ALREADY_CLAIMED = "already_claimed_today"
REASON_SOCIAL_ACTION_MISSING = "social_action_missing"
REASON_VAULT_DEPLETED = "vault_depleted"
REASON_DAILY_LIMIT = "daily_limit_reached"
REASON_STREAK_REQUIRED = "streak_required"


@dataclass(frozen=True)
class EligibilityPolicy:
    """Anti-bot thresholds.

    Identities at or above ``reputation_threshold`` qualify directly; the
    rest need a consecutive-day streak of at least ``min_streak_days``.
    """

    anti_bot_enabled: bool = True
    reputation_threshold: float = 0.5
    min_streak_days: int = 3


@dataclass(frozen=True)
class EligibilitySnapshot:
    blacklisted: bool
    already_claimed_today: bool
    has_performed_social_action_today: bool
    vault_balance: int
    min_reserve: int
    reward_amount: int
    global_claims_today: int
    global_daily_limit: int
    reputation_score: float | None = None
    current_streak: int = 0


@dataclass(frozen=True)
class EligibilityResult:
    snapshot: EligibilitySnapshot
    can_claim: bool
    reasons: list[str] = field(default_factory=list)


def _passes_anti_bot(snapshot: EligibilitySnapshot, policy: EligibilityPolicy) -> bool:
    if not policy.anti_bot_enabled:
        return True
    score = snapshot.reputation_score
    if score is not None and score >= policy.reputation_threshold:
        return True
    return snapshot.current_streak >= policy.min_streak_days


def decide(snapshot: EligibilitySnapshot, policy: EligibilityPolicy) -> EligibilityResult:
    """Apply the claim rule to a snapshot. Pure function."""
    reasons: list[str] = []
    if snapshot.blacklisted:
        reasons.append(REASON_BLACKLISTED)
    if snapshot.already_claimed_today:
        reasons.append(REASON_ALREADY_CLAIMED)
    if not snapshot.has_performed_social_action_today:
        reasons.append(REASON_SOCIAL_ACTION_MISSING)
    if snapshot.vault_balance <= snapshot.min_reserve:
        reasons.append(REASON_VAULT_DEPLETED)
    if snapshot.global_claims_today >= snapshot.global_daily_limit:
        reasons.append(REASON_DAILY_LIMIT)
    if not _passes_anti_bot(snapshot, policy):
        reasons.append(REASON_STREAK_REQUIRED)
    return EligibilityResult(snapshot=snapshot, can_claim=not reasons, reasons=reasons)


class EligibilityEvaluator:
    """Builds a fresh snapshot per call and applies ``decide``."""

    def __init__(
        self,
        *,
        chains: ChainClientPool,
        counter: DailyClaimCounter,
        social: SocialActivityClient,
        reputation: ReputationClient,
        policy: EligibilityPolicy,
    ) -> None:
        self._chains = chains
        self._counter = counter
        self._social = social
        self._reputation = reputation
        self.policy = policy

    async def snapshot(self, claimer: str, social_id: int, chain_id: int) -> EligibilitySnapshot:
        claimer = normalize_address(claimer, field="claimer")
        require_positive_int(social_id, field="socialId")
        require_positive_int(chain_id, field="chainId")
        chain = self._chains.get(chain_id)

        # The first failing read cancels the others.
        try:
            async with asyncio.TaskGroup() as group:
                status_task = group.create_task(chain.get_claim_status(claimer, social_id))
                count_task = group.create_task(self._counter.current(chain_id))
                activity_task = group.create_task(self._social.get_activity(claimer, chain_id))
                score_task = group.create_task(self._reputation.get_score(social_id))
        except ExceptionGroup as failures:
            raise failures.exceptions[0]

        status = status_task.result()
        claims_today = count_task.result()
        activity = activity_task.result()
        score = score_task.result()
        return EligibilitySnapshot(
            blacklisted=status.fid_blacklisted,
            already_claimed_today=status.fid_claimed_today or status.claimer_claimed_today,
            has_performed_social_action_today=activity.performed_on(self._counter.today()),
            vault_balance=status.vault_balance,
            min_reserve=status.min_reserve,
            reward_amount=status.reward,
            global_claims_today=claims_today,
            global_daily_limit=self._counter.limit,
            reputation_score=score,
            current_streak=activity.current_streak,
        )

    async def evaluate(self, claimer: str, social_id: int, chain_id: int) -> EligibilityResult:
        result = decide(await self.snapshot(claimer, social_id, chain_id), self.policy)
        logger.debug(
            "Eligibility evaluated: can_claim=%s reasons=%s",
            result.can_claim,
            result.reasons,
            extra={"operation": "eligibility", "claimer": claimer, "social_id": social_id, "chain_id": chain_id},
        )
        return result
