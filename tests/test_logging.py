"""Tests for the shared logging configuration helpers."""

import structlog
from ordering.utils.logging import (
    REDACTED,
    add_context,
    clear_context,
    get_log_level,
    mask_email,
    scrub_sensitive_fields,
)


class TestLogLevel:
    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert get_log_level() == "ERROR"

    def test_level_follows_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "production")
        assert get_log_level() == "INFO"

    def test_unknown_environment_defaults_to_info(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "qa")
        assert get_log_level() == "INFO"


class TestScrubbing:
    def test_secrets_are_redacted(self):
        event = scrub_sensitive_fields(None, "info", {"event": "x", "client_secret": "pi_1_secret_abc"})
        assert event["client_secret"] == REDACTED

    def test_emails_are_masked(self):
        event = scrub_sensitive_fields(None, "info", {"event": "x", "receipt_email": "jamie@example.com"})
        assert event["receipt_email"] == "j***@example.com"

    def test_other_fields_untouched(self):
        event = scrub_sensitive_fields(None, "info", {"event": "Order placed", "total": "210.00"})
        assert event == {"event": "Order placed", "total": "210.00"}

    def test_malformed_email_is_redacted(self):
        assert mask_email("not-an-email") == REDACTED


class TestContext:
    def test_context_binds_and_clears(self):
        clear_context()
        add_context(domain="ordering", path="/orders/guest")
        assert structlog.contextvars.get_contextvars() == {"domain": "ordering", "path": "/orders/guest"}
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}
