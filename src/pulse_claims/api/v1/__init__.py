# src/pulse_claims/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import claims_router, system_router

__all__ = [
    "claims_router",
    "system_router",
]
