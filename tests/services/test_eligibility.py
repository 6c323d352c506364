"""Tests for the eligibility rule and evaluator."""

import asyncio
from dataclasses import replace

import httpx
import pytest

from pulse_claims.core.errors import UnsupportedChainError, UpstreamUnavailable, ValidationError
from pulse_claims.services.context import ClaimsContext
from pulse_claims.services.eligibility import (
    REASON_ALREADY_CLAIMED,
    REASON_BLACKLISTED,
    REASON_DAILY_LIMIT,
    REASON_SOCIAL_ACTION_MISSING,
    REASON_STREAK_REQUIRED,
    REASON_VAULT_DEPLETED,
    EligibilityEvaluator,
    EligibilityPolicy,
    EligibilitySnapshot,
    decide,
)
from pulse_claims.services.social import ReputationClient

from tests.fakes import TEST_CLAIMER, TEST_SOCIAL_ID

POLICY = EligibilityPolicy(anti_bot_enabled=True, reputation_threshold=0.5, min_streak_days=3)

ELIGIBLE = EligibilitySnapshot(
    blacklisted=False,
    already_claimed_today=False,
    has_performed_social_action_today=True,
    vault_balance=100,
    min_reserve=10,
    reward_amount=1,
    global_claims_today=5,
    global_daily_limit=250,
    reputation_score=None,
    current_streak=3,
)


def test_decide_allows_eligible_snapshot() -> None:
    result = decide(ELIGIBLE, POLICY)
    assert result.can_claim
    assert result.reasons == []


@pytest.mark.parametrize(
    ("changes", "reason"),
    [
        ({"blacklisted": True}, REASON_BLACKLISTED),
        ({"already_claimed_today": True}, REASON_ALREADY_CLAIMED),
        ({"has_performed_social_action_today": False}, REASON_SOCIAL_ACTION_MISSING),
        ({"vault_balance": 10}, REASON_VAULT_DEPLETED),
        ({"global_claims_today": 250}, REASON_DAILY_LIMIT),
        ({"current_streak": 2}, REASON_STREAK_REQUIRED),
    ],
)
def test_decide_reports_each_failed_condition(changes: dict, reason: str) -> None:
    result = decide(replace(ELIGIBLE, **changes), POLICY)
    assert not result.can_claim
    assert result.reasons == [reason]


def test_decide_collects_every_reason() -> None:
    snapshot = replace(ELIGIBLE, blacklisted=True, global_claims_today=300, vault_balance=0)
    result = decide(snapshot, POLICY)
    assert result.reasons == [REASON_BLACKLISTED, REASON_VAULT_DEPLETED, REASON_DAILY_LIMIT]


def test_high_reputation_skips_streak_requirement() -> None:
    snapshot = replace(ELIGIBLE, current_streak=0, reputation_score=0.9)
    assert decide(snapshot, POLICY).can_claim


def test_unknown_reputation_counts_as_low() -> None:
    snapshot = replace(ELIGIBLE, current_streak=1, reputation_score=None)
    assert decide(snapshot, POLICY).reasons == [REASON_STREAK_REQUIRED]


def test_anti_bot_can_be_disabled() -> None:
    snapshot = replace(ELIGIBLE, current_streak=0)
    assert decide(snapshot, EligibilityPolicy(anti_bot_enabled=False)).can_claim


@pytest.mark.asyncio
async def test_evaluator_builds_snapshot_from_sources(claims_context: ClaimsContext, fake_redis, fake_chain) -> None:
    await fake_redis.set(claims_context.counter.key(8453), 118)

    result = await claims_context.evaluator.evaluate(TEST_CLAIMER, TEST_SOCIAL_ID, 8453)

    assert result.can_claim
    snapshot = result.snapshot
    assert snapshot.global_claims_today == 118
    assert snapshot.global_daily_limit == 250
    assert snapshot.vault_balance == fake_chain.status.vault_balance
    assert snapshot.current_streak == 5
    assert snapshot.has_performed_social_action_today
    assert snapshot.reputation_score is None
    # Evaluation never writes.
    assert await claims_context.counter.current(8453) == 118


@pytest.mark.asyncio
async def test_evaluator_reports_contract_flags(claims_context: ClaimsContext, fake_chain) -> None:
    fake_chain.status = replace(fake_chain.status, fid_blacklisted=True, claimer_claimed_today=True)

    result = await claims_context.evaluator.evaluate(TEST_CLAIMER, TEST_SOCIAL_ID, 8453)

    assert result.reasons == [REASON_BLACKLISTED, REASON_ALREADY_CLAIMED]


@pytest.mark.asyncio
async def test_evaluator_social_action_from_previous_day(claims_context: ClaimsContext, social_backend) -> None:
    social_backend.last_gm_day -= 1

    result = await claims_context.evaluator.evaluate(TEST_CLAIMER, TEST_SOCIAL_ID, 8453)

    assert result.reasons == [REASON_SOCIAL_ACTION_MISSING]


@pytest.mark.asyncio
async def test_evaluator_uses_reputation_score(
    claims_context: ClaimsContext, chain_pool, social_client, social_backend
) -> None:
    social_backend.current_streak = 0

    def reputation_handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["fid"] == str(TEST_SOCIAL_ID)
        return httpx.Response(200, json={"users": [{"fid": TEST_SOCIAL_ID, "score": 0.8}]})

    reputation = ReputationClient(
        "http://reputation.test",
        client=httpx.AsyncClient(
            base_url="http://reputation.test",
            transport=httpx.MockTransport(reputation_handler),
        ),
    )
    evaluator = EligibilityEvaluator(
        chains=chain_pool,
        counter=claims_context.counter,
        social=social_client,
        reputation=reputation,
        policy=POLICY,
    )

    result = await evaluator.evaluate(TEST_CLAIMER, TEST_SOCIAL_ID, 8453)

    assert result.can_claim
    assert result.snapshot.reputation_score == 0.8


@pytest.mark.asyncio
async def test_evaluator_rejects_malformed_input(claims_context: ClaimsContext, fake_chain) -> None:
    with pytest.raises(ValidationError):
        await claims_context.evaluator.evaluate("0x1234", TEST_SOCIAL_ID, 8453)
    with pytest.raises(ValidationError):
        await claims_context.evaluator.evaluate(TEST_CLAIMER, 0, 8453)
    with pytest.raises(UnsupportedChainError):
        await claims_context.evaluator.evaluate(TEST_CLAIMER, TEST_SOCIAL_ID, 42220)
    assert fake_chain.calls == []


@pytest.mark.asyncio
async def test_evaluator_social_outage_is_upstream_unavailable(
    claims_context: ClaimsContext, social_backend
) -> None:
    social_backend.status_code = 502

    with pytest.raises(UpstreamUnavailable):
        await claims_context.evaluator.evaluate(TEST_CLAIMER, TEST_SOCIAL_ID, 8453)


@pytest.mark.asyncio
async def test_failed_lookup_cancels_pending_reads(
    claims_context: ClaimsContext, fake_chain, social_backend
) -> None:
    social_backend.status_code = 502
    started = asyncio.Event()
    cancelled = asyncio.Event()

    async def slow_claim_status(claimer: str, social_id: int):
        started.set()
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.set()
            raise
        return fake_chain.status

    fake_chain.get_claim_status = slow_claim_status

    with pytest.raises(UpstreamUnavailable):
        await claims_context.evaluator.evaluate(TEST_CLAIMER, TEST_SOCIAL_ID, 8453)

    assert started.is_set()
    assert cancelled.is_set()
