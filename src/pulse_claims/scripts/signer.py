# src/pulse_claims/scripts/signer.py
"""
Voucher signer key helper.

Rotation procedure:
1. ``python -m pulse_claims.scripts.signer generate`` prints a fresh key and
   its address.
2. Set the contract's backend signer to the printed address.
3. Deploy the new key as CLAIM_SIGNER_PRIVATE_KEY.

Vouchers signed by the old key stop verifying once the contract is updated;
claims that already settled are unaffected.
"""

import argparse
import sys

from eth_account import Account
from web3 import Web3

from pulse_claims.core.errors import SignerConfigurationError
from pulse_claims.core.settings import settings
from pulse_claims.services.signing import ClaimSigner


def generate_key() -> tuple[str, str]:
    """Create a new signing key.

    Returns:
        Tuple of (address, 0x-prefixed private key hex)
    """
    account = Account.create()
    return account.address, Web3.to_hex(account.key)


def configured_address(private_key: str | None) -> str:
    """Return the address of the configured signing key."""
    return ClaimSigner.from_private_key(private_key).address


def main() -> None:
    parser = argparse.ArgumentParser(description="Manage the claim voucher signing key")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("generate", help="Generate a new key and print its address.")
    address_parser = subparsers.add_parser("address", help="Print the address of the configured key.")
    address_parser.add_argument(
        "--key",
        default=None,
        help="Private key to inspect (defaults to CLAIM_SIGNER_PRIVATE_KEY)",
    )
    args = parser.parse_args()

    if args.command == "generate":
        address, private_key = generate_key()
        print(f"[signer] address: {address}")
        print(f"[signer] private key: {private_key}")
        print("[signer] update the contract's backend signer before deploying this key")
        return

    try:
        print(f"[signer] address: {configured_address(args.key or settings.claim_signer_private_key)}")
    except SignerConfigurationError as exc:
        print(f"[signer] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
