"""Tests for the claim authorization flow."""

from dataclasses import replace

import pytest

from pulse_claims.core.errors import NotEligible, RateLimited, UnsupportedChainError, ValidationError
from pulse_claims.services.context import ClaimsContext, build_claims_context
from pulse_claims.services.eligibility import REASON_ALREADY_CLAIMED
from pulse_claims.services.social import ReputationClient

from tests.fakes import TEST_CLAIMER, TEST_SOCIAL_ID, make_settings


async def _authorize(context: ClaimsContext, clock, **overrides):
    request = {
        "claimer": TEST_CLAIMER,
        "social_id": TEST_SOCIAL_ID,
        "deadline": int(clock()) + 300,
        "chain_id": 8453,
        "network_identity": "203.0.113.7",
    }
    request.update(overrides)
    return await context.authorization.authorize(**request)


@pytest.mark.asyncio
async def test_eligible_claimer_gets_voucher(claims_context: ClaimsContext, clock) -> None:
    voucher = await _authorize(claims_context, clock)

    assert voucher.nonce == 7
    assert voucher.chain_id == 8453
    assert voucher.deadline == int(clock()) + 300


@pytest.mark.asyncio
@pytest.mark.parametrize("offset", [0, -1, 901])
async def test_deadline_outside_window_is_rejected(
    claims_context: ClaimsContext, clock, fake_chain, offset: int
) -> None:
    with pytest.raises(ValidationError):
        await _authorize(claims_context, clock, deadline=int(clock()) + offset)
    assert fake_chain.calls == []


@pytest.mark.asyncio
async def test_unknown_chain_is_rejected_before_rate_limit(
    claims_context: ClaimsContext, clock, fake_redis
) -> None:
    with pytest.raises(UnsupportedChainError):
        await _authorize(claims_context, clock, chain_id=42220)
    assert await fake_redis.get("pulse:ratelimit:authorize:ip:203.0.113.7") is None


@pytest.mark.asyncio
async def test_ineligible_claimer_gets_reasons_and_no_nonce_read(
    claims_context: ClaimsContext, clock, fake_chain
) -> None:
    fake_chain.status = replace(fake_chain.status, fid_claimed_today=True)

    with pytest.raises(NotEligible) as exc_info:
        await _authorize(claims_context, clock)

    assert exc_info.value.reasons == [REASON_ALREADY_CLAIMED]
    assert exc_info.value.to_payload()["reasons"] == [REASON_ALREADY_CLAIMED]
    assert "nonces" not in [call[0] for call in fake_chain.calls]


@pytest.mark.asyncio
async def test_claimer_rate_limit(store, chain_pool, social_client, clock) -> None:
    context = build_claims_context(
        make_settings(AUTHORIZE_CLAIMER_LIMIT=2),
        store=store,
        chains=chain_pool,
        social=social_client,
        reputation=ReputationClient(None),
        clock=clock,
    )

    await _authorize(context, clock, network_identity="198.51.100.1")
    await _authorize(context, clock, network_identity="198.51.100.2")
    with pytest.raises(RateLimited):
        await _authorize(context, clock, network_identity="198.51.100.3")
