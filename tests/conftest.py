from typing import AsyncGenerator

import pytest
from faker import Faker
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from tests.schemas import WalletData
from tests.utils import StubVerifier, generate_wallet_data
from wallet_gateway.api.deps.services import get_rate_limiter, get_signature_verifier
from wallet_gateway.main import app
from wallet_gateway.services.rate_limiter import RateLimiterRegistry
from wallet_gateway.services.session_codec import SessionCodec


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def faker() -> Faker:
    return Faker()


@pytest.fixture
def wallet() -> WalletData:
    return generate_wallet_data()


@pytest.fixture
def verifier() -> StubVerifier:
    return StubVerifier()


@pytest.fixture
def rate_limiter() -> RateLimiterRegistry:
    """Isolated registry, roomy enough that tests are never throttled by accident."""
    return RateLimiterRegistry(capacity=1000, fill_rate=1000)


@pytest.fixture
def session_codec() -> SessionCodec:
    """The codec the running app (and its gateway middleware) signs with."""
    return app.state.session_codec


@pytest.fixture
async def test_app(
    verifier: StubVerifier,
    rate_limiter: RateLimiterRegistry,
) -> AsyncGenerator[FastAPI, None]:
    """The application with a stub verifier and an isolated rate limiter."""
    app.dependency_overrides[get_signature_verifier] = lambda: verifier
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac
