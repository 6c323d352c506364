"""System and transparency endpoints for Pulse Claims."""

from fastapi import APIRouter

from pulse_claims.api.v1.dependencies import ClaimsContextDep

router = APIRouter(prefix="/system", tags=["system", "transparency"])


@router.get("/config")
async def get_public_config(context: ClaimsContextDep) -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings; suitable for transparency UIs.

    Args:
        context: Application claims context

    Returns:
        Dictionary containing app metadata, the voucher signer address,
        supported chains and their contracts, and claim limits
    """
    config = context.settings
    return {
        "app": {
            "name": config.app_name,
            "version": config.app_version,
            "debug": config.debug,
        },
        "signer": {
            "address": context.signer.address,
            "deadline_max_seconds": config.claim_deadline_max_seconds,
        },
        "chains": [
            {
                "chain_id": chain.chain_id,
                "name": chain.name,
                "rewards_contract": chain.rewards_contract,
                "rpc_max_attempts": chain.retry.max_attempts,
            }
            for chain in context.registry
        ],
        "default_chain_id": config.default_chain_id,
        "limits": {
            "daily_claim_limit": config.daily_claim_limit,
            "window_seconds": config.rate_limit_window_seconds,
            "authorize_ip": config.authorize_ip_limit,
            "authorize_claimer": config.authorize_claimer_limit,
            "confirm_ip": config.confirm_ip_limit,
            "confirm_claimer": config.confirm_claimer_limit,
        },
        "anti_bot": {
            "enabled": config.anti_bot_enabled,
            "reputation_threshold": config.reputation_threshold,
            "min_streak_days": config.min_streak_days,
        },
    }


@router.get("/health")
async def get_system_health(context: ClaimsContextDep) -> dict[str, object]:
    """Report connectivity to the shared counter store."""
    store_ok = await context.store.ping()
    return {
        "status": "ok" if store_ok else "degraded",
        "store": "ok" if store_ok else "unreachable",
        "chains": context.registry.chain_ids,
    }
