"""Async JSON-RPC access to the DailyRewards contract and transaction data.

Every read goes through ``ChainClient._call`` which applies the chain's
``RetryPolicy``: a per-attempt timeout, a bounded number of attempts and
exponential backoff between them. Exhausted retries surface as
``UpstreamUnavailable``; transactions that stay unknown after the schedule
surface as ``None`` so callers can report them as pending.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError, TransactionNotFound

from pulse_claims.chain.abi import DAILY_REWARDS_ABI
from pulse_claims.core.chains import ChainConfig, ChainRegistry
from pulse_claims.core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class ContractClaimStatus:
    """Decoded ``canClaimToday`` view result."""

    ok: bool
    fid_blacklisted: bool
    fid_claimed_today: bool
    claimer_claimed_today: bool
    reward: int
    vault_balance: int
    min_reserve: int

    @classmethod
    def from_call_result(cls, result: Any) -> ContractClaimStatus:
        ok, blacklisted, fid_claimed, claimer_claimed, reward, balance, reserve = result
        return cls(
            ok=bool(ok),
            fid_blacklisted=bool(blacklisted),
            fid_claimed_today=bool(fid_claimed),
            claimer_claimed_today=bool(claimer_claimed),
            reward=int(reward),
            vault_balance=int(balance),
            min_reserve=int(reserve),
        )


class ChainClient:
    """RPC client bound to one network and its rewards contract."""

    def __init__(
        self,
        config: ChainConfig,
        w3: AsyncWeb3 | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self.w3 = w3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(config.rpc_url))
        self._sleep = sleep
        self._rewards = self.w3.eth.contract(
            address=config.rewards_contract,
            abi=DAILY_REWARDS_ABI,
        )

    @property
    def chain_id(self) -> int:
        return self.config.chain_id

    @property
    def rewards_contract(self) -> str:
        return self.config.rewards_contract

    async def _call(
        self,
        operation: str,
        factory: Callable[[], Awaitable[T]],
        *,
        missing_ok: bool = False,
        context: dict[str, Any] | None = None,
    ) -> T | None:
        policy = self.config.retry
        log_context = {"operation": operation, "chain_id": self.chain_id, **(context or {})}
        last_exc: Exception | None = None
        missing = False

        for attempt in range(policy.max_attempts):
            if attempt:
                await self._sleep(policy.delay_for(attempt - 1))
            try:
                result = await asyncio.wait_for(factory(), timeout=policy.timeout_seconds)
            except TransactionNotFound as exc:
                if not missing_ok:
                    raise UpstreamUnavailable(
                        f"{self.config.name} RPC returned no data for {operation}",
                        context=log_context,
                    ) from exc
                missing = True
                last_exc = exc
                continue
            except ContractLogicError as exc:
                # A reverting view call will not succeed on retry.
                logger.error("RPC %s reverted: %s", operation, exc, extra=log_context)
                raise UpstreamUnavailable(
                    f"{self.config.name} contract call {operation} reverted",
                    context=log_context,
                ) from exc
            except Exception as exc:  # transport errors differ between providers
                missing = False
                last_exc = exc
                logger.warning(
                    "RPC %s failed (attempt %d/%d): %s",
                    operation,
                    attempt + 1,
                    policy.max_attempts,
                    exc,
                    extra=log_context,
                )
                continue

            if result is None and missing_ok:
                missing = True
                continue
            return result

        if missing:
            logger.info("RPC %s found nothing after %d attempts", operation, policy.max_attempts, extra=log_context)
            return None
        raise UpstreamUnavailable(
            f"{self.config.name} RPC unavailable for {operation}",
            context=log_context,
        ) from last_exc

    async def get_claim_nonce(self, claimer: str) -> int:
        """Read the contract-owned voucher nonce for ``claimer``."""
        address = AsyncWeb3.to_checksum_address(claimer)
        nonce = await self._call(
            "nonces",
            lambda: self._rewards.functions.nonces(address).call(),
            context={"claimer": address},
        )
        return int(nonce)

    async def get_claim_status(self, claimer: str, social_id: int) -> ContractClaimStatus:
        """Read blacklist, claimed-today and vault facts from ``canClaimToday``."""
        address = AsyncWeb3.to_checksum_address(claimer)
        result = await self._call(
            "canClaimToday",
            lambda: self._rewards.functions.canClaimToday(address, social_id).call(),
            context={"claimer": address, "social_id": social_id},
        )
        return ContractClaimStatus.from_call_result(result)

    async def get_receipt(self, tx_hash: str) -> Mapping[str, Any] | None:
        return await self._call(
            "get_transaction_receipt",
            lambda: self.w3.eth.get_transaction_receipt(tx_hash),
            missing_ok=True,
            context={"tx_hash": tx_hash},
        )

    async def get_transaction(self, tx_hash: str) -> Mapping[str, Any] | None:
        return await self._call(
            "get_transaction",
            lambda: self.w3.eth.get_transaction(tx_hash),
            missing_ok=True,
            context={"tx_hash": tx_hash},
        )

    async def get_revert_reason(self, tx_hash: str, block_number: int) -> str | None:
        """Best-effort revert reason: replay the call against the parent block."""
        tx = await self.get_transaction(tx_hash)
        if tx is None:
            return None
        call = {
            "from": tx["from"],
            "to": tx["to"],
            "data": tx["input"],
            "value": tx.get("value", 0),
        }
        try:
            await asyncio.wait_for(
                self.w3.eth.call(call, block_identifier=max(block_number - 1, 0)),
                timeout=self.config.retry.timeout_seconds,
            )
        except ContractLogicError as exc:
            return exc.message or str(exc)
        except Exception as exc:  # replay is diagnostic only
            logger.debug("Revert reason unavailable for %s: %s", tx_hash, exc)
        return None


class ChainClientPool:
    """One ``ChainClient`` per configured network, looked up by chain id."""

    def __init__(self, clients: Mapping[int, ChainClient], registry: ChainRegistry) -> None:
        self._clients = dict(clients)
        self.registry = registry

    @classmethod
    def from_registry(cls, registry: ChainRegistry) -> ChainClientPool:
        return cls({config.chain_id: ChainClient(config) for config in registry}, registry)

    def get(self, chain_id: int) -> ChainClient:
        # Raises UnsupportedChainError for unknown ids.
        config = self.registry.get(chain_id)
        return self._clients[config.chain_id]
