"""Input normalisation shared by the services and request schemas."""

from __future__ import annotations

import re

from web3 import Web3

from pulse_claims.core.errors import ValidationError

_TX_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def normalize_address(value: str, *, field: str = "address") -> str:
    """Return the checksummed form of an EVM address or raise ``ValidationError``."""
    if not isinstance(value, str) or not Web3.is_address(value):
        raise ValidationError(f"Invalid {field}: expected a 20-byte hex address")
    return Web3.to_checksum_address(value)


def normalize_tx_hash(value: str) -> str:
    if not isinstance(value, str) or not _TX_HASH_RE.match(value):
        raise ValidationError("Invalid transactionHash: expected 0x-prefixed 32-byte hex")
    return value.lower()


def require_positive_int(value: int, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"Invalid {field}: expected a positive integer")
    return value
