# src/pulse_claims/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .claims import router as claims_router
from .system import router as system_router

__all__ = [
    "claims_router",
    "system_router",
]
