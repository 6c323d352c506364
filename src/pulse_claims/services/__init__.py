"""Claim services: eligibility, voucher issuance, settlement and limits."""

from .authorization import AuthorizationService
from .context import ClaimsContext, build_claims_context
from .eligibility import EligibilityEvaluator
from .issuer import VoucherIssuer
from .settlement import SettlementConfirmer

__all__ = [
    "AuthorizationService",
    "ClaimsContext",
    "EligibilityEvaluator",
    "SettlementConfirmer",
    "VoucherIssuer",
    "build_claims_context",
]
