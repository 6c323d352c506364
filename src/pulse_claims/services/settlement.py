"""Settlement confirmation for submitted claim transactions.

The confirmer checks that a reported transaction succeeded, went to the
configured rewards contract and called its ``claim`` function, then advances
the global daily counter exactly once per transaction hash.

Decoded call arguments are not compared with the reporting claimer or any
issued voucher. The contract is the ledger of record and enforces nonces and
signatures; the counter here is auxiliary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hexbytes import HexBytes

from pulse_claims.chain.client import ChainClientPool
from pulse_claims.core.errors import OnChainFailure, ReceiptNotFound, VerificationMismatch
from pulse_claims.core.validation import normalize_address, normalize_tx_hash, require_positive_int
from pulse_claims.services.rate_limit import DailyClaimCounter, ProcessedTransactionLedger, RateLimiter

logger = logging.getLogger(__name__)

RECEIPT_STATUS_SUCCESS = 1


@dataclass(frozen=True)
class SettlementResult:
    accepted: bool
    count: int
    allowed: bool
    already_processed: bool = False

    @property
    def message(self) -> str:
        if self.already_processed:
            return "Transaction already processed"
        return "Claim recorded"


class SettlementConfirmer:
    """Verifies claim receipts and advances the daily counter."""

    def __init__(
        self,
        *,
        chains: ChainClientPool,
        counter: DailyClaimCounter,
        ledger: ProcessedTransactionLedger,
        ip_limiter: RateLimiter,
        claimer_limiter: RateLimiter,
        claim_selector: bytes,
    ) -> None:
        self._chains = chains
        self._counter = counter
        self._ledger = ledger
        self._ip_limiter = ip_limiter
        self._claimer_limiter = claimer_limiter
        self.claim_selector = claim_selector

    async def confirm(
        self,
        *,
        tx_hash: str,
        claimer: str,
        chain_id: int,
        network_identity: str,
    ) -> SettlementResult:
        """Verify ``tx_hash`` on ``chain_id`` and count it once.

        Args:
            tx_hash: Hash of the submitted claim transaction.
            claimer: Address that reports the transaction.
            chain_id: Network the transaction was submitted to.
            network_identity: Caller identity used for rate limiting.

        Returns:
            The counter value after this confirmation and whether it is still
            within the daily limit.

        Raises:
            ReceiptNotFound: The receipt or transaction is not available yet.
            OnChainFailure: The transaction reverted.
            VerificationMismatch: Wrong destination contract or function.
        """
        tx_hash = normalize_tx_hash(tx_hash)
        claimer = normalize_address(claimer, field="claimerAddress")
        require_positive_int(chain_id, field="chainId")
        chain = self._chains.get(chain_id)

        await self._ip_limiter.enforce(network_identity)
        await self._claimer_limiter.enforce(claimer)

        context = {"operation": "confirm", "tx_hash": tx_hash, "claimer": claimer, "chain_id": chain_id}

        receipt = await chain.get_receipt(tx_hash)
        if receipt is None:
            raise ReceiptNotFound("Transaction receipt not found", context=context)

        if int(receipt.get("status", 0)) != RECEIPT_STATUS_SUCCESS:
            revert_reason = await chain.get_revert_reason(tx_hash, int(receipt.get("blockNumber") or 0))
            logger.info("Claim transaction reverted: %s", revert_reason, extra=context)
            raise OnChainFailure("Transaction failed on chain", revert_reason=revert_reason, context=context)

        destination = receipt.get("to") or ""
        if destination.lower() != chain.rewards_contract.lower():
            logger.warning(
                "Receipt destination %s does not match rewards contract %s",
                destination,
                chain.rewards_contract,
                extra=context,
            )
            raise VerificationMismatch(
                VerificationMismatch.WRONG_CONTRACT,
                "Transaction was not sent to the rewards contract",
                context=context,
            )

        tx = await chain.get_transaction(tx_hash)
        if tx is None:
            # Receipt and transaction lookups can land on nodes at different heights.
            logger.info("Transaction body not available yet", extra=context)
            raise ReceiptNotFound("Transaction not found", context=context)

        call_data = HexBytes(tx.get("input") or b"")
        if bytes(call_data[:4]) != self.claim_selector:
            logger.warning("Transaction does not call claim()", extra=context)
            raise VerificationMismatch(
                VerificationMismatch.WRONG_FUNCTION,
                "Transaction does not call the claim function",
                context=context,
            )

        if not await self._ledger.mark_processed(chain_id, tx_hash):
            count = await self._counter.current(chain_id)
            logger.info("Transaction already processed", extra={**context, "count": count})
            return SettlementResult(
                accepted=True,
                count=count,
                allowed=self._counter.is_allowed(count),
                already_processed=True,
            )

        count = await self._counter.increment(chain_id)
        allowed = self._counter.is_allowed(count)
        logger.info(
            "Claim settled: count=%d allowed=%s",
            count,
            allowed,
            extra={**context, "count": count},
        )
        return SettlementResult(accepted=True, count=count, allowed=allowed)
