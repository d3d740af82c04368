"""
Integration tests for application startup and graceful shutdown.
"""

import asyncio
import logging

import pytest

from portfolio_api.main import app


@pytest.fixture
def app_state(monkeypatch, make_service, transport_factory):
    """Swap the app's mail transport and contact service for fakes."""
    transport = transport_factory(gate=asyncio.Event())
    service = make_service(transport)
    monkeypatch.setattr(app.state, "mail_transport", transport)
    monkeypatch.setattr(app.state, "contact_service", service)
    monkeypatch.setattr("portfolio_api.main.settings.SHUTDOWN_GRACE_SECONDS", 0.05)
    return transport, service


class TestLifespan:
    @pytest.mark.asyncio
    async def test_startup_logs_mail_configuration(self, app_state, caplog):
        caplog.set_level(logging.INFO)

        async with app.router.lifespan_context(app):
            pass

        assert "Mail configuration check" in caplog.text
        assert "has_email_user=True" in caplog.text
        assert "test-app-password" not in caplog.text

    @pytest.mark.asyncio
    async def test_shutdown_drains_pending_and_closes_transport(
        self, app_state, submission
    ):
        transport, service = app_state

        async with app.router.lifespan_context(app):
            service.dispatch(submission)
            assert service.pending == 2
            # Deliveries finish within the grace period
            transport.gate.set()

        assert len(transport.sent) == 2
        assert service.pending == 0
        assert transport.closed is True

    @pytest.mark.asyncio
    async def test_shutdown_cancels_after_grace_period(self, app_state, submission):
        transport, service = app_state

        async with app.router.lifespan_context(app):
            tasks = service.dispatch(submission)

        assert all(task.cancelled() for task in tasks)
        assert transport.sent == []
        assert service.pending == 0
        assert transport.closed is True
