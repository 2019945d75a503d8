"""Pytest configuration and fixtures for report service tests."""

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.providers.simulated import SimulatedIdentityProvider

WEBHOOK_URL = "https://discord.test/api/webhooks/1/token"


class RecordingWebhook:
    """MockTransport handler that records requests and answers with a fixed status."""

    def __init__(self, status_code: int = 204):
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def make_settings(**overrides) -> Settings:
    values = {
        "discord_webhook_url": None,
        "identity_check_delay_seconds": 0,
        "rate_limit_sweep_interval_seconds": 3600,
        "log_level": "INFO",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def valid_payload():
    return {
        "identityId": "123456789012345678",
        "nameAndCode": "Ivan Petrov | 42",
        "rank": "5",
        "department": "DEA",
        "tabletScreenshotUrl": "https://x.test/a.png",
        "inventoryScreenshotUrl": "https://x.test/b.png",
        "reason": "relocation",
    }


@pytest.fixture
def webhook():
    return RecordingWebhook()


@pytest.fixture
def client(webhook):
    """Client for an app with the webhook configured and answered by `webhook`."""
    app = create_app(
        make_settings(discord_webhook_url=WEBHOOK_URL),
        identity_provider=SimulatedIdentityProvider(delay_seconds=0),
        webhook_transport=webhook.transport,
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def client_without_webhook():
    app = create_app(
        make_settings(),
        identity_provider=SimulatedIdentityProvider(delay_seconds=0),
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def proxied_client_factory(webhook):
    """Build a client for an app that trusts X-Forwarded-For, by flag or proxy list."""

    def factory(**overrides):
        app = create_app(
            make_settings(discord_webhook_url=WEBHOOK_URL, **overrides),
            identity_provider=SimulatedIdentityProvider(delay_seconds=0),
            webhook_transport=webhook.transport,
        )
        return TestClient(app)

    return factory
