"""Tests for the retrying chain client."""

import pytest
from web3.exceptions import ContractLogicError, TransactionNotFound

from pulse_claims.chain.client import ChainClient, ChainClientPool
from pulse_claims.core.chains import ChainConfig, ChainRegistry, RetryPolicy
from pulse_claims.core.errors import UnsupportedChainError, UpstreamUnavailable

from tests.fakes import TEST_CLAIMER, TEST_REWARDS_ADDRESS

TX_HASH = "0x" + "34" * 32


@pytest.fixture()
def config() -> ChainConfig:
    return ChainConfig(
        chain_id=42220,
        name="celo",
        rpc_url="http://rpc.test",
        rewards_contract=TEST_REWARDS_ADDRESS,
        retry=RetryPolicy(max_attempts=4, base_delay_seconds=1.0, timeout_seconds=5.0),
    )


@pytest.fixture()
def w3(mocker):
    return mocker.MagicMock()


@pytest.fixture()
def sleep(mocker):
    return mocker.AsyncMock()


@pytest.fixture()
def chain(config: ChainConfig, w3, sleep) -> ChainClient:
    return ChainClient(config, w3, sleep=sleep)


def test_retry_policy_backoff_doubles() -> None:
    policy = RetryPolicy(max_attempts=5, base_delay_seconds=0.5)
    assert [policy.delay_for(attempt) for attempt in range(4)] == [0.5, 1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_receipt_retries_with_exponential_backoff(chain: ChainClient, w3, sleep, mocker) -> None:
    receipt = {"status": 1, "to": TEST_REWARDS_ADDRESS}
    w3.eth.get_transaction_receipt = mocker.AsyncMock(
        side_effect=[ConnectionError("reset"), TransactionNotFound("pending"), receipt]
    )

    assert await chain.get_receipt(TX_HASH) == receipt
    assert w3.eth.get_transaction_receipt.await_count == 3
    assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0]


@pytest.mark.asyncio
async def test_receipt_missing_after_all_attempts_is_none(chain: ChainClient, w3, sleep, mocker) -> None:
    w3.eth.get_transaction_receipt = mocker.AsyncMock(side_effect=TransactionNotFound("pending"))

    assert await chain.get_receipt(TX_HASH) is None
    assert w3.eth.get_transaction_receipt.await_count == 4
    assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_transport_failure_exhausts_into_upstream_unavailable(chain: ChainClient, w3, mocker) -> None:
    w3.eth.get_transaction_receipt = mocker.AsyncMock(side_effect=ConnectionError("refused"))

    with pytest.raises(UpstreamUnavailable) as exc_info:
        await chain.get_receipt(TX_HASH)

    assert exc_info.value.retryable
    assert isinstance(exc_info.value.__cause__, ConnectionError)
    assert w3.eth.get_transaction_receipt.await_count == 4


@pytest.mark.asyncio
async def test_nonce_read_from_rewards_contract(chain: ChainClient, w3, mocker) -> None:
    nonces = w3.eth.contract.return_value.functions.nonces
    nonces.return_value.call = mocker.AsyncMock(return_value=7)

    assert await chain.get_claim_nonce(TEST_CLAIMER) == 7
    w3.eth.contract.assert_called_once()
    assert w3.eth.contract.call_args.kwargs["address"] == TEST_REWARDS_ADDRESS
    assert nonces.call_args.args[0].lower() == TEST_CLAIMER


@pytest.mark.asyncio
async def test_reverting_view_call_is_not_retried(chain: ChainClient, w3, sleep, mocker) -> None:
    can_claim = w3.eth.contract.return_value.functions.canClaimToday
    can_claim.return_value.call = mocker.AsyncMock(side_effect=ContractLogicError("execution reverted"))

    with pytest.raises(UpstreamUnavailable):
        await chain.get_claim_status(TEST_CLAIMER, 42)

    assert can_claim.return_value.call.await_count == 1
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_claim_status_is_decoded(chain: ChainClient, w3, mocker) -> None:
    can_claim = w3.eth.contract.return_value.functions.canClaimToday
    can_claim.return_value.call = mocker.AsyncMock(
        return_value=(True, False, False, True, 10**18, 5 * 10**20, 10**19)
    )

    status = await chain.get_claim_status(TEST_CLAIMER, 42)

    assert status.claimer_claimed_today
    assert not status.fid_blacklisted
    assert status.reward == 10**18
    assert status.vault_balance == 5 * 10**20


def test_pool_rejects_unknown_chain(config: ChainConfig, chain: ChainClient) -> None:
    pool = ChainClientPool({42220: chain}, ChainRegistry({42220: config}))

    assert pool.get(42220) is chain
    with pytest.raises(UnsupportedChainError):
        pool.get(8453)
