"""
Pytest configuration and shared fixtures for the contact API tests.
"""

import os

# Set required environment variables BEFORE importing app modules
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "INFO")
os.environ.setdefault(
    "ALLOWED_ORIGINS", '["http://localhost:3000", "https://portfolio.example"]'
)
os.environ.setdefault("EMAIL_USER", "sender@example.com")
# Note: This is a test-only dummy value, not a real secret
os.environ.setdefault("EMAIL_PASS", "test-app-password")
os.environ.setdefault("CONTACT_EMAIL", "owner@example.com")
os.environ.setdefault("SITE_OWNER_NAME", "Test Owner")

import asyncio
from typing import List, Optional

import pytest

from portfolio_api.contact.schemas import ContactSubmission, OutboundMessage
from portfolio_api.contact.service import ContactService
from portfolio_api.core.errors import MailTransportError
from portfolio_api.mail.transport import SendResult

SENDER = "sender@example.com"
RECIPIENT = "owner@example.com"
OWNER_NAME = "Test Owner"


class FakeTransport:
    """In-memory mail transport.

    ``gate`` (if given) holds every send until it is set; ``fail`` makes
    every send raise MailTransportError.
    """

    def __init__(self, fail: bool = False, gate: Optional[asyncio.Event] = None):
        self.fail = fail
        self.gate = gate
        self.started: List[OutboundMessage] = []
        self.sent: List[OutboundMessage] = []
        self.closed = False

    async def send(self, message: OutboundMessage) -> SendResult:
        self.started.append(message)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise MailTransportError(f"Failed to send message to {message.to}: boom")
        self.sent.append(message)
        return SendResult(recipients=[message.to], response="250 2.0.0 OK")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def valid_payload():
    return {"name": "Jane", "email": "jane@x.com", "message": "Hi"}


@pytest.fixture
def submission():
    return ContactSubmission(
        name="Jane Doe",
        email="jane@example.com",
        subject="Project inquiry",
        message="Hello there.\nAre you available?",
    )


@pytest.fixture
def transport_factory():
    """Build FakeTransport instances with custom behaviour."""
    return FakeTransport


@pytest.fixture
def make_service():
    """Build a ContactService over the given transport with test identities."""

    def _make(transport, **overrides):
        options = {"sender": SENDER, "recipient": RECIPIENT, "owner_name": OWNER_NAME}
        options.update(overrides)
        return ContactService(transport=transport, **options)

    return _make
