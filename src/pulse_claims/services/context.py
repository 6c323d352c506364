"""Application context holding every shared handle the services need.

The context is built once at startup and stored on ``app.state``. Nothing in
the services reaches for module-level singletons; tests build their own
context around in-memory doubles.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from pulse_claims.chain.abi import parse_selector
from pulse_claims.chain.client import ChainClientPool
from pulse_claims.core.chains import ChainRegistry, load_chain_registry
from pulse_claims.core.clock import Clock
from pulse_claims.core.settings import Settings
from pulse_claims.services.authorization import AuthorizationService
from pulse_claims.services.eligibility import EligibilityEvaluator, EligibilityPolicy
from pulse_claims.services.issuer import VoucherIssuer
from pulse_claims.services.rate_limit import DailyClaimCounter, ProcessedTransactionLedger, RateLimiter
from pulse_claims.services.settlement import SettlementConfirmer
from pulse_claims.services.signing import ClaimSigner
from pulse_claims.services.social import ReputationClient, SocialActivityClient
from pulse_claims.services.store import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class ClaimsContext:
    settings: Settings
    store: KeyValueStore
    registry: ChainRegistry
    chains: ChainClientPool
    signer: ClaimSigner
    social: SocialActivityClient
    reputation: ReputationClient
    counter: DailyClaimCounter
    evaluator: EligibilityEvaluator
    authorization: AuthorizationService
    settlement: SettlementConfirmer

    async def close(self) -> None:
        await self.social.close()
        await self.reputation.close()
        await self.store.close()


def build_claims_context(
    config: Settings,
    *,
    store: KeyValueStore | None = None,
    chains: ChainClientPool | None = None,
    social: SocialActivityClient | None = None,
    reputation: ReputationClient | None = None,
    clock: Clock = time.time,
) -> ClaimsContext:
    """Wire the claim services from settings.

    Collaborators may be passed in to replace the network-backed defaults.

    Args:
        config: Loaded application settings.
        store: Key-value store; defaults to Redis at ``config.redis_url``.
        chains: Chain client pool; defaults to one RPC client per configured chain.
        social: Social activity lookup client.
        reputation: Reputation lookup client.
        clock: Time source for deadlines and day numbers.

    Returns:
        The assembled context.

    Raises:
        SignerConfigurationError: If the voucher signing key is missing or invalid.
    """
    signer = ClaimSigner.from_private_key(config.claim_signer_private_key)

    registry = chains.registry if chains is not None else load_chain_registry(config)
    if not len(registry):
        logger.warning("No chain has a rewards contract configured; every claim will be rejected")
    chains = chains or ChainClientPool.from_registry(registry)
    store = store or KeyValueStore.from_url(config.redis_url, prefix=config.key_prefix)
    social = social or SocialActivityClient(
        config.social_activity_url,
        timeout_seconds=config.http_timeout_seconds,
    )
    reputation = reputation or ReputationClient(
        config.reputation_url,
        api_key=config.reputation_api_key,
        timeout_seconds=config.http_timeout_seconds,
    )

    window = config.rate_limit_window_seconds
    counter = DailyClaimCounter(store, limit=config.daily_claim_limit, clock=clock)
    evaluator = EligibilityEvaluator(
        chains=chains,
        counter=counter,
        social=social,
        reputation=reputation,
        policy=EligibilityPolicy(
            anti_bot_enabled=config.anti_bot_enabled,
            reputation_threshold=config.reputation_threshold,
            min_streak_days=config.min_streak_days,
        ),
    )
    authorization = AuthorizationService(
        chains=chains,
        evaluator=evaluator,
        issuer=VoucherIssuer(chains, signer),
        ip_limiter=RateLimiter(store, "authorize:ip", limit=config.authorize_ip_limit, window_seconds=window),
        claimer_limiter=RateLimiter(
            store, "authorize:claimer", limit=config.authorize_claimer_limit, window_seconds=window
        ),
        max_deadline_seconds=config.claim_deadline_max_seconds,
        clock=clock,
    )
    settlement = SettlementConfirmer(
        chains=chains,
        counter=counter,
        ledger=ProcessedTransactionLedger(store),
        ip_limiter=RateLimiter(store, "confirm:ip", limit=config.confirm_ip_limit, window_seconds=window),
        claimer_limiter=RateLimiter(
            store, "confirm:claimer", limit=config.confirm_claimer_limit, window_seconds=window
        ),
        claim_selector=parse_selector(config.claim_function_selector),
    )

    logger.info(
        "Claims context ready: signer=%s chains=%s",
        signer.address,
        registry.chain_ids,
    )
    return ClaimsContext(
        settings=config,
        store=store,
        registry=registry,
        chains=chains,
        signer=signer,
        social=social,
        reputation=reputation,
        counter=counter,
        evaluator=evaluator,
        authorization=authorization,
        settlement=settlement,
    )
