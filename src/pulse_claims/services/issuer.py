"""Nonce and signature issuance for claim vouchers."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pulse_claims.chain.client import ChainClientPool
from pulse_claims.core.validation import normalize_address, require_positive_int
from pulse_claims.services.signing import ClaimSigner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimVoucher:
    """Signed authorization for one claim call. Never persisted."""

    signature: str
    nonce: int
    chain_id: int
    deadline: int
    contract: str


class VoucherIssuer:
    """Reads the live contract nonce and signs the claim digest over it.

    The nonce is fetched on every call. Two vouchers issued back to back for
    the same claimer carry the same nonce; the contract accepts whichever is
    submitted first and rejects the other.
    """

    def __init__(self, chains: ChainClientPool, signer: ClaimSigner) -> None:
        self._chains = chains
        self._signer = signer

    async def issue(self, claimer: str, social_id: int, deadline: int, chain_id: int) -> ClaimVoucher:
        claimer = normalize_address(claimer, field="claimer")
        require_positive_int(social_id, field="socialId")
        require_positive_int(deadline, field="deadline")
        chain = self._chains.get(chain_id)

        # Raises UpstreamUnavailable on RPC failure; nothing is signed then.
        nonce = await chain.get_claim_nonce(claimer)
        signature = self._signer.sign_claim(claimer, social_id, nonce, deadline, chain.rewards_contract)

        logger.info(
            "Issued claim voucher",
            extra={
                "operation": "issue_voucher",
                "claimer": claimer,
                "social_id": social_id,
                "chain_id": chain_id,
                "nonce": nonce,
                "deadline": deadline,
            },
        )
        return ClaimVoucher(
            signature=signature,
            nonce=nonce,
            chain_id=chain_id,
            deadline=deadline,
            contract=chain.rewards_contract,
        )
