"""Claim authorization, confirmation and eligibility endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from pulse_claims.api.v1.dependencies import ClaimsContextDep, NetworkIdentityDep
from pulse_claims.core.validation import require_positive_int
from pulse_claims.schemas.claims import (
    ClaimAuthorizationRequest,
    ClaimConfirmationRequest,
    ClaimConfirmationResponse,
    ClaimStatsResponse,
    ClaimVoucherResponse,
    EligibilityResponse,
)

router = APIRouter(prefix="/claims", tags=["claims"])


@router.post("/authorize", response_model=ClaimVoucherResponse)
async def authorize_claim(
    payload: ClaimAuthorizationRequest,
    context: ClaimsContextDep,
    network_identity: NetworkIdentityDep,
) -> ClaimVoucherResponse:
    """Issue a signed voucher for an eligible claimer.

    Args:
        payload: Claimer, social id, deadline and chain
        context: Application claims context
        network_identity: Caller identity for rate limiting

    Returns:
        Voucher carrying the signature, live nonce and target contract
    """
    voucher = await context.authorization.authorize(
        claimer=payload.claimer,
        social_id=payload.social_id,
        deadline=payload.deadline,
        chain_id=payload.chain_id,
        network_identity=network_identity,
    )
    return ClaimVoucherResponse.from_voucher(voucher)


@router.post("/confirm", response_model=ClaimConfirmationResponse)
async def confirm_claim(
    payload: ClaimConfirmationRequest,
    context: ClaimsContextDep,
    network_identity: NetworkIdentityDep,
) -> ClaimConfirmationResponse:
    """Verify a submitted claim transaction and count it toward the daily total.

    Repeat confirmations of the same hash return the current count unchanged.
    """
    result = await context.settlement.confirm(
        tx_hash=payload.transaction_hash,
        claimer=payload.claimer_address,
        chain_id=payload.chain_id,
        network_identity=network_identity,
    )
    return ClaimConfirmationResponse.from_result(result)


@router.get("/eligibility", response_model=EligibilityResponse)
async def get_eligibility(
    context: ClaimsContextDep,
    claimer: Annotated[str, Query()],
    social_id: Annotated[int, Query(alias="socialId")],
    chain_id: Annotated[int | None, Query(alias="chainId")] = None,
) -> EligibilityResponse:
    """Report whether the claimer could claim right now, and why not."""
    result = await context.evaluator.evaluate(
        claimer,
        social_id,
        context.settings.default_chain_id if chain_id is None else chain_id,
    )
    return EligibilityResponse.from_result(result)


@router.get("/stats", response_model=ClaimStatsResponse)
async def get_claim_stats(
    context: ClaimsContextDep,
    chain_id: Annotated[int | None, Query(alias="chainId")] = None,
) -> ClaimStatsResponse:
    """Return today's global claim count for a chain."""
    if chain_id is None:
        chain_id = context.settings.default_chain_id
    require_positive_int(chain_id, field="chainId")
    context.registry.get(chain_id)
    count = await context.counter.current(chain_id)
    return ClaimStatsResponse(
        count=count,
        limit=context.counter.limit,
        chain_id=chain_id,
        day=context.counter.today(),
    )
