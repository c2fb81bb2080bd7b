"""Pytest configuration and fixtures"""
import base64
import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from itsdangerous import TimestampSigner

from authgate.config import Settings
from authgate.exceptions import DependencyUnhealthyError
from authgate.main import create_app
from authgate.oauth import SESSION_MAX_AGE

SESSION_SECRET = "test-session-secret"
FRONTEND_URL = "http://localhost:5173"


class FakeHealthChecker:
    """Stands in for the database health check."""

    def __init__(self, error: str | None = None):
        self.error = error
        self.closed = False

    async def check(self) -> dict:
        if self.error:
            raise DependencyUnhealthyError(self.error)
        return {"status": "up", "message": "It's healthy"}

    async def close(self) -> None:
        self.closed = True


def make_settings(**overrides) -> Settings:
    values = dict(
        GOOGLE_CLIENT_ID="abc",
        GOOGLE_CLIENT_SECRET="xyz",
        SESSION_SECRET_KEY=SESSION_SECRET,
        CALLBACK_BASE_URL="http://localhost:3000",
        FRONTEND_URL=FRONTEND_URL,
        IS_PRODUCTION=False,
        SENTRY_DSN=None,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


def decode_session(cookie_value: str) -> dict:
    """Decode a Starlette session cookie signed with SESSION_SECRET."""
    data = TimestampSigner(SESSION_SECRET).unsign(cookie_value.encode(), max_age=SESSION_MAX_AGE)
    return json.loads(base64.b64decode(data))


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def health_checker():
    return FakeHealthChecker()


@pytest.fixture
def app(settings, health_checker):
    return create_app(settings, health_checker=health_checker)


@pytest.fixture
def client(app):
    with TestClient(app, follow_redirects=False) as c:
        yield c


@pytest.fixture
def fake_google(app, monkeypatch):
    """
    Replace the network calls of the registered Google client.

    Authlib still generates and checks the state; only the token exchange
    and the userinfo request are faked.
    """
    google = app.state.auth.get_provider("google").client
    fake = SimpleNamespace(
        profile={"email": "a@b.com", "name": "A B"},
        token={
            "access_token": "ya29.secret-access",
            "refresh_token": "1//secret-refresh",
            "token_type": "Bearer",
            "expires_at": 1900000000,
        },
        exchange_error=None,
        exchanges=[],
        userinfo_calls=0,
    )

    async def fetch_access_token(**kwargs):
        fake.exchanges.append(kwargs)
        if fake.exchange_error is not None:
            raise fake.exchange_error
        return dict(fake.token)

    async def userinfo(**kwargs):
        fake.userinfo_calls += 1
        return dict(fake.profile)

    monkeypatch.setattr(google, "fetch_access_token", fetch_access_token)
    monkeypatch.setattr(google, "userinfo", userinfo)
    return fake
