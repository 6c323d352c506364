"""Contract ABI fragments for the DailyRewards contract.

Only the functions the service touches are listed. The deployed contract
exposes ``claim`` under the selector ``0x6e8aa08a``, which settlement matches
against raw call data.
"""

from __future__ import annotations

from typing import Any

from hexbytes import HexBytes

DAILY_REWARDS_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "nonces",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "canClaimToday",
        "inputs": [
            {"name": "claimer", "type": "address"},
            {"name": "fid", "type": "uint256"},
        ],
        "outputs": [
            {
                "name": "",
                "type": "tuple",
                "components": [
                    {"name": "ok", "type": "bool"},
                    {"name": "fidIsBlacklisted", "type": "bool"},
                    {"name": "fidClaimedToday", "type": "bool"},
                    {"name": "claimerClaimedToday", "type": "bool"},
                    {"name": "reward", "type": "uint256"},
                    {"name": "vaultBalance", "type": "uint256"},
                    {"name": "minReserve", "type": "uint256"},
                ],
            }
        ],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "claim",
        "inputs": [
            {"name": "claimer", "type": "address"},
            {"name": "fid", "type": "uint256"},
            {"name": "nonce", "type": "uint256"},
            {"name": "deadline", "type": "uint256"},
            {"name": "signature", "type": "bytes"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
]


def parse_selector(value: str) -> bytes:
    """Parse a hex function selector such as ``0x6e8aa08a`` into its 4 raw bytes."""
    try:
        selector = bytes(HexBytes(value.strip()))
    except ValueError as exc:
        raise ValueError(f"Invalid function selector: {value!r}") from exc
    if len(selector) != 4:
        raise ValueError(f"Function selector must be 4 bytes, got {len(selector)}: {value!r}")
    return selector
