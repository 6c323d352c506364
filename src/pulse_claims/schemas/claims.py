"""Claim-related Pydantic schemas.

Wire names are camelCase to match the web client; Python attributes stay
snake_case. Token amounts are serialized as decimal strings because they do
not fit a JavaScript number.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from web3 import Web3

from pulse_claims.core.settings import BASE_CHAIN_ID
from pulse_claims.services.eligibility import EligibilityResult
from pulse_claims.services.issuer import ClaimVoucher
from pulse_claims.services.settlement import SettlementResult


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_address(value: str) -> str:
    if not Web3.is_address(value):
        raise ValueError("expected a 20-byte hex address")
    return Web3.to_checksum_address(value)


class ClaimAuthorizationRequest(CamelModel):
    """Request for a signed claim voucher."""

    claimer: str = Field(..., description="Claimer account address")
    social_id: int = Field(..., gt=0, description="Social identity (fid) of the claimer")
    deadline: int = Field(..., gt=0, description="Unix timestamp after which the voucher expires")
    chain_id: int = Field(..., gt=0, description="Network the claim will be submitted to")

    @field_validator("claimer")
    @classmethod
    def validate_claimer(cls, value: str) -> str:
        return _check_address(value)


class ClaimVoucherResponse(CamelModel):
    """Signed voucher the client passes to the contract's claim function."""

    signature: str
    nonce: int
    chain_id: int
    deadline: int
    contract: str

    @classmethod
    def from_voucher(cls, voucher: ClaimVoucher) -> "ClaimVoucherResponse":
        return cls(
            signature=voucher.signature,
            nonce=voucher.nonce,
            chain_id=voucher.chain_id,
            deadline=voucher.deadline,
            contract=voucher.contract,
        )


class ClaimConfirmationRequest(CamelModel):
    """Report of a submitted claim transaction."""

    transaction_hash: str = Field(..., pattern=r"^0x[0-9a-fA-F]{64}$")
    claimer_address: str
    chain_id: int = Field(BASE_CHAIN_ID, gt=0)

    @field_validator("claimer_address")
    @classmethod
    def validate_claimer_address(cls, value: str) -> str:
        return _check_address(value)


class ClaimConfirmationResponse(CamelModel):
    success: bool = True
    count: int
    allowed: bool
    message: str

    @classmethod
    def from_result(cls, result: SettlementResult) -> "ClaimConfirmationResponse":
        return cls(
            success=result.accepted,
            count=result.count,
            allowed=result.allowed,
            message=result.message,
        )


class EligibilitySnapshotResponse(CamelModel):
    blacklisted: bool
    already_claimed_today: bool
    has_performed_social_action_today: bool
    vault_balance: str
    min_reserve: str
    reward_amount: str
    global_claims_today: int
    global_daily_limit: int
    reputation_score: float | None = None
    current_streak: int = 0


class EligibilityResponse(CamelModel):
    can_claim: bool
    reasons: list[str]
    snapshot: EligibilitySnapshotResponse

    @classmethod
    def from_result(cls, result: EligibilityResult) -> "EligibilityResponse":
        snapshot = result.snapshot
        return cls(
            can_claim=result.can_claim,
            reasons=list(result.reasons),
            snapshot=EligibilitySnapshotResponse(
                blacklisted=snapshot.blacklisted,
                already_claimed_today=snapshot.already_claimed_today,
                has_performed_social_action_today=snapshot.has_performed_social_action_today,
                vault_balance=str(snapshot.vault_balance),
                min_reserve=str(snapshot.min_reserve),
                reward_amount=str(snapshot.reward_amount),
                global_claims_today=snapshot.global_claims_today,
                global_daily_limit=snapshot.global_daily_limit,
                reputation_score=snapshot.reputation_score,
                current_streak=snapshot.current_streak,
            ),
        )


class ClaimStatsResponse(CamelModel):
    """Global claim count for the current UTC day on one chain."""

    count: int
    limit: int
    chain_id: int
    day: int
