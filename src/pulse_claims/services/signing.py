"""Voucher signing with the server-held claim key.

The digest layout must match what the DailyRewards contract recomputes:

    keccak256(abi.encodePacked(
        address claimer, uint256 fid, uint256 nonce, uint256 deadline, address contract
    ))

signed as an EIP-191 personal message. Changing field order, width or
encoding here breaks every claim.
"""

from __future__ import annotations

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from web3 import Web3

from pulse_claims.core.errors import SignerConfigurationError

CLAIM_DIGEST_TYPES = ("address", "uint256", "uint256", "uint256", "address")


def claim_digest(claimer: str, social_id: int, nonce: int, deadline: int, contract: str) -> bytes:
    """Build the packed claim digest.

    Args:
        claimer: Claimer account address.
        social_id: Social identity (fid) the reward is claimed for.
        nonce: Contract nonce for the claimer at issuance time.
        deadline: Unix timestamp after which the contract rejects the voucher.
        contract: Rewards contract the voucher is scoped to.

    Returns:
        The 32-byte keccak256 digest.
    """
    return bytes(
        Web3.solidity_keccak(
            list(CLAIM_DIGEST_TYPES),
            [
                Web3.to_checksum_address(claimer),
                social_id,
                nonce,
                deadline,
                Web3.to_checksum_address(contract),
            ],
        )
    )


class ClaimSigner:
    """Holds the voucher key and signs claim digests."""

    def __init__(self, account: LocalAccount) -> None:
        self._account = account

    @classmethod
    def from_private_key(cls, private_key: str | None) -> ClaimSigner:
        """Load the signer, failing loudly when the key is absent or malformed.

        Raises:
            SignerConfigurationError: If ``private_key`` is empty or not a valid key.
        """
        if not private_key:
            raise SignerConfigurationError("CLAIM_SIGNER_PRIVATE_KEY is not configured")
        try:
            account = Account.from_key(private_key)
        except Exception as err:  # eth-keys raises its own validation errors
            raise SignerConfigurationError("CLAIM_SIGNER_PRIVATE_KEY is not a valid private key") from err
        return cls(account)

    @property
    def address(self) -> str:
        return self._account.address

    def sign_digest(self, digest: bytes) -> str:
        """Sign a 32-byte digest as a personal message and return 0x-prefixed hex."""
        signed = self._account.sign_message(encode_defunct(primitive=digest))
        return Web3.to_hex(signed.signature)

    def sign_claim(self, claimer: str, social_id: int, nonce: int, deadline: int, contract: str) -> str:
        return self.sign_digest(claim_digest(claimer, social_id, nonce, deadline, contract))
