"""
Shared fixtures for integration tests.

Every integration test talks to the real FastAPI app through the async
`client` fixture. The app's contact service and rate limiter are replaced
per test via dependency overrides, so nothing touches SMTP and rate-limit
counters never leak between tests.

Example:
    @pytest.mark.asyncio
    async def test_something(client):
        response = await client.post("/api/contact", json={...})
        assert response.status_code == 200
"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from portfolio_api.contact.rate_limit import ContactRateLimiter
from portfolio_api.contact.router import get_contact_service, get_rate_limiter
from portfolio_api.main import app


@pytest_asyncio.fixture
async def mail_transport(transport_factory):
    """Fake transport behind the overridden contact service."""
    return transport_factory()


@pytest_asyncio.fixture
async def contact_service(make_service, mail_transport):
    service = make_service(mail_transport)
    yield service
    await service.aclose(grace_seconds=1.0)


@pytest_asyncio.fixture
async def rate_limiter():
    return ContactRateLimiter(max_requests=5, window_minutes=15)


@pytest_asyncio.fixture
async def make_client(contact_service, rate_limiter):
    """
    Build AsyncClients against the app, optionally from a specific source
    address. Dependency overrides are cleared after the test.
    """
    app.dependency_overrides[get_contact_service] = lambda: contact_service
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter

    clients = []

    def _make(remote_address: str = "127.0.0.1") -> AsyncClient:
        ac = AsyncClient(
            transport=ASGITransport(app=app, client=(remote_address, 123)),
            base_url="http://test",
        )
        clients.append(ac)
        return ac

    yield _make

    for ac in clients:
        await ac.aclose()
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(make_client):
    """
    Async test client for the app.

    IMPORTANT: Always use `await` with client methods:
        response = await client.get("/api/health")
    """
    return make_client()
