"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .claims import (
    ClaimAuthorizationRequest,
    ClaimConfirmationRequest,
    ClaimConfirmationResponse,
    ClaimStatsResponse,
    ClaimVoucherResponse,
    EligibilityResponse,
)

__all__ = [
    "ClaimAuthorizationRequest", "ClaimVoucherResponse",
    "ClaimConfirmationRequest", "ClaimConfirmationResponse",
    "EligibilityResponse", "ClaimStatsResponse",
]
