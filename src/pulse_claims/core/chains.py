"""Supported network registry.

Lookups are exhaustive: an unknown chain id, or one whose rewards contract is
not configured, raises ``UnsupportedChainError`` instead of falling back to a
default network.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from web3 import Web3

from pulse_claims.core.errors import UnsupportedChainError
from pulse_claims.core.settings import ChainSettings, Settings


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry schedule for chain reads."""

    max_attempts: int = 3
    base_delay_seconds: float = 0.5
    timeout_seconds: float = 10.0

    def delay_for(self, attempt: int) -> float:
        """Return the backoff before retry number ``attempt`` (0-based)."""
        return self.base_delay_seconds * (2**attempt)


@dataclass(frozen=True)
class ChainConfig:
    """Immutable configuration for one network."""

    chain_id: int
    name: str
    rpc_url: str
    rewards_contract: str
    retry: RetryPolicy


class ChainRegistry:
    """Exhaustive chain-id keyed lookup of network configuration."""

    def __init__(self, chains: Mapping[int, ChainConfig]) -> None:
        self._chains = dict(chains)

    def get(self, chain_id: int) -> ChainConfig:
        try:
            return self._chains[chain_id]
        except KeyError:
            raise UnsupportedChainError(chain_id) from None

    def is_supported(self, chain_id: int) -> bool:
        return chain_id in self._chains

    @property
    def chain_ids(self) -> list[int]:
        return sorted(self._chains)

    def __iter__(self) -> Iterator[ChainConfig]:
        return iter(self._chains[chain_id] for chain_id in self.chain_ids)

    def __len__(self) -> int:
        return len(self._chains)


def _build_chain_config(chain_id: int, chain: ChainSettings, address: str) -> ChainConfig:
    if not Web3.is_address(address):
        raise ValueError(f"Invalid rewards contract address for chain {chain_id}: {address!r}")
    return ChainConfig(
        chain_id=chain_id,
        name=chain.name,
        rpc_url=chain.rpc_url,
        rewards_contract=Web3.to_checksum_address(address),
        retry=RetryPolicy(
            max_attempts=chain.rpc_max_attempts,
            base_delay_seconds=chain.rpc_base_delay_seconds,
            timeout_seconds=chain.rpc_timeout_seconds,
        ),
    )


def load_chain_registry(config: Settings) -> ChainRegistry:
    """Build the registry from settings, skipping chains without a contract."""
    overrides = config.rewards_address_overrides
    chains: dict[int, ChainConfig] = {}
    for chain_id, chain in config.chains.items():
        address = overrides.get(chain_id) or chain.daily_rewards_address
        if not address:
            continue
        chains[chain_id] = _build_chain_config(chain_id, chain, address)
    return ChainRegistry(chains)
