# tests/conftest.py
from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pulse_claims.chain.client import ChainClientPool
from pulse_claims.core.chains import ChainRegistry, load_chain_registry
from pulse_claims.core.settings import BASE_CHAIN_ID, Settings
from pulse_claims.main import app as fastapi_app
from pulse_claims.services.context import ClaimsContext, build_claims_context
from pulse_claims.services.social import ReputationClient, SocialActivityClient
from pulse_claims.services.store import KeyValueStore

from tests.fakes import (
    FakeChainClient,
    FakeClock,
    FakeRedis,
    SocialBackend,
    make_settings,
)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def fake_redis(clock: FakeClock) -> FakeRedis:
    return FakeRedis(clock)


@pytest.fixture()
def store(fake_redis: FakeRedis) -> KeyValueStore:
    return KeyValueStore(fake_redis, prefix="pulse")


@pytest.fixture()
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture()
def registry(test_settings: Settings) -> ChainRegistry:
    return load_chain_registry(test_settings)


@pytest.fixture()
def fake_chain(registry: ChainRegistry) -> FakeChainClient:
    return FakeChainClient(registry.get(BASE_CHAIN_ID))


@pytest.fixture()
def chain_pool(registry: ChainRegistry, fake_chain: FakeChainClient) -> ChainClientPool:
    return ChainClientPool({BASE_CHAIN_ID: fake_chain}, registry)


@pytest.fixture()
def social_backend(clock: FakeClock) -> SocialBackend:
    return SocialBackend(clock)


@pytest.fixture()
def social_client(social_backend: SocialBackend) -> SocialActivityClient:
    return SocialActivityClient(
        "http://social.test",
        client=httpx.AsyncClient(
            base_url="http://social.test",
            transport=httpx.MockTransport(social_backend.handler),
        ),
    )


@pytest.fixture()
def claims_context(
    test_settings: Settings,
    store: KeyValueStore,
    chain_pool: ChainClientPool,
    social_client: SocialActivityClient,
    clock: FakeClock,
) -> ClaimsContext:
    return build_claims_context(
        test_settings,
        store=store,
        chains=chain_pool,
        social=social_client,
        reputation=ReputationClient(None),
        clock=clock,
    )


@pytest.fixture()
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI, claims_context: ClaimsContext) -> Iterator[TestClient]:
    app.state.claims_context = claims_context
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.state.claims_context = None
