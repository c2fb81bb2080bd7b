"""Tests for auth initialization and configuration validation"""
import pytest

from authgate.exceptions import ConfigurationError
from authgate.main import create_app
from authgate.oauth import (
    SESSION_MAX_AGE,
    ProviderConfig,
    callback_url_for,
    google_provider,
    initialize_auth,
)
from tests.conftest import FakeHealthChecker, make_settings


def test_initialize_registers_google():
    auth = initialize_auth(make_settings())

    assert auth.provider_names == ["google"]
    google = auth.get_provider("google")
    assert google.display_name == "Google"
    assert google.callback_url == "http://localhost:3000/auth/callback/google"


def test_session_policy_is_fixed():
    policy = initialize_auth(make_settings()).session_policy

    assert policy.max_age == SESSION_MAX_AGE == 30 * 86400
    assert policy.path == "/"
    assert policy.http_only is True
    assert policy.secure is False


def test_production_toggle_sets_secure_flag():
    policy = initialize_auth(make_settings(IS_PRODUCTION=True)).session_policy

    assert policy.secure is True


@pytest.mark.parametrize("field", ["GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "SESSION_SECRET_KEY"])
@pytest.mark.parametrize("value", [None, "", "   "])
def test_missing_required_value_fails(field, value):
    with pytest.raises(ConfigurationError, match=field):
        initialize_auth(make_settings(**{field: value}))


@pytest.mark.parametrize("field", ["CALLBACK_BASE_URL", "FRONTEND_URL"])
def test_relative_url_fails(field):
    with pytest.raises(ConfigurationError, match=field):
        initialize_auth(make_settings(**{field: "/not-absolute"}))


def test_create_app_refuses_to_start_without_credentials():
    with pytest.raises(ConfigurationError):
        create_app(make_settings(GOOGLE_CLIENT_ID=None), health_checker=FakeHealthChecker())


def test_callback_url_strips_trailing_slash():
    settings = make_settings(CALLBACK_BASE_URL="https://auth.example.com/")

    assert callback_url_for(settings, "google") == "https://auth.example.com/auth/callback/google"


def test_reinitialization_builds_independent_context():
    first = initialize_auth(make_settings())
    second = initialize_auth(make_settings(GOOGLE_CLIENT_ID="other"))

    assert first.oauth is not second.oauth
    assert first.get_provider("google").client.client_id == "abc"
    assert second.get_provider("google").client.client_id == "other"


def test_custom_provider_list():
    github = ProviderConfig(
        name="github",
        display_name="GitHub",
        client_id="gh-id",
        client_secret="gh-secret",
        callback_url="http://localhost:3000/auth/callback/github",
        authorize_url="https://github.com/login/oauth/authorize",
        access_token_url="https://github.com/login/oauth/access_token",
        userinfo_url="https://api.github.com/user",
        scope="read:user user:email",
    )

    auth = initialize_auth(make_settings(), providers=[github])

    assert auth.provider_names == ["github"]


def test_duplicate_provider_fails():
    settings = make_settings()

    with pytest.raises(ConfigurationError, match="twice"):
        initialize_auth(settings, providers=[google_provider(settings), google_provider(settings)])


def test_empty_provider_list_fails():
    with pytest.raises(ConfigurationError):
        initialize_auth(make_settings(), providers=[])


def test_provider_config_is_hashable():
    config = google_provider(make_settings())

    assert hash(config) == hash(google_provider(make_settings()))
    assert dict(config.metadata)["issuer"] == "https://accounts.google.com"
