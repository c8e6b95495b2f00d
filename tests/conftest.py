"""Shared test fixtures."""

import os
from collections.abc import AsyncGenerator

# Set test environment before the application reads its settings
os.environ["GRAMMAR_DATABASE_URL"] = "memory://"
os.environ["GRAMMAR_OPENAI_API_KEY"] = "test-key"
os.environ["GRAMMAR_SECRET_KEY"] = "test-secret"
os.environ["GRAMMAR_PASSWORD_HASH_ROUNDS"] = "4"
os.environ["GRAMMAR_LOG_LEVEL"] = "ERROR"  # Reduce log noise

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from mock_provider import MockProvider  # noqa: E402

from grammar_api import app  # noqa: E402
from grammar_api.auth import AuthGateway  # noqa: E402
from grammar_api.grammar import GrammarProxy  # noqa: E402
from grammar_api.storage import InMemoryUserRepository  # noqa: E402
from grammar_api.tokens import TokenCodec  # noqa: E402


@pytest.fixture
def token_codec() -> TokenCodec:
    """Token codec signing with the test secret."""
    return TokenCodec(secret_key="test-secret")


@pytest.fixture
def repository() -> InMemoryUserRepository:
    """Empty in-memory credential store."""
    return InMemoryUserRepository()


@pytest.fixture
def mock_provider() -> MockProvider:
    """Stubbed upstream completion provider."""
    return MockProvider()


@pytest.fixture
def auth_gateway(repository: InMemoryUserRepository, token_codec: TokenCodec) -> AuthGateway:
    """Auth gateway over the in-memory store, with cheap password hashing."""
    return AuthGateway(repository=repository, token_codec=token_codec, hash_rounds=4)


@pytest.fixture
def grammar_proxy(mock_provider: MockProvider) -> GrammarProxy:
    """Grammar proxy over the stubbed provider."""
    return GrammarProxy(llm_provider=mock_provider)


@pytest_asyncio.fixture
async def client(
    auth_gateway: AuthGateway, grammar_proxy: GrammarProxy
) -> AsyncGenerator[AsyncClient, None]:
    """Test client fixture - services injected via app.state."""
    app.state.auth_gateway = auth_gateway
    app.state.grammar_proxy = grammar_proxy

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.state.auth_gateway = None
    app.state.grammar_proxy = None


@pytest_asyncio.fixture
async def auth_headers(auth_gateway: AuthGateway) -> dict[str, str]:
    """Authorization header for a freshly signed-up user."""
    result = await auth_gateway.signup("test_user", "secret-pw")
    return {"Authorization": f"Bearer {result['token']}"}
