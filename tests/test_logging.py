"""Tests for secret redaction in structured logs"""
import structlog

from authgate.logging_config import REDACTED, get_logger, redact_secrets


def test_tokens_are_redacted():
    event = redact_secrets(None, "info", {
        "event": "user_authenticated",
        "email": "a@b.com",
        "access_token": "ya29.token",
        "refresh_token": "1//refresh",
        "code": "4/auth-code",
    })

    assert event["email"] == "a@b.com"
    assert event["access_token"] == REDACTED
    assert event["refresh_token"] == REDACTED
    assert event["code"] == REDACTED


def test_empty_values_left_alone():
    event = redact_secrets(None, "info", {"event": "x", "refresh_token": ""})

    assert event["refresh_token"] == ""


def test_get_logger_binds_context():
    log = get_logger(provider="google")

    assert structlog.get_context(log) == {"provider": "google"}
