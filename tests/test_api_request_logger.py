"""Tests for chat server request logging."""

import logging

import pytest

from chat_sync.adapters.chat_api.api_request_logger import (
    _build_url_with_params,
    log_api_request,
    redact_sensitive_headers,
    should_log_requests,
)


def test_logging_disabled_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CHAT_SYNC_LOG_REQUESTS", raising=False)

    assert should_log_requests() is False


def test_build_url_with_sorted_params() -> None:
    assert _build_url_with_params("http://x/api", {"b": 2, "a": 1}) == "http://x/api?a=1&b=2"
    assert _build_url_with_params("http://x/api?c=3", {"a": 1}) == "http://x/api?c=3&a=1"
    assert _build_url_with_params("http://x/api", None) == "http://x/api"


def test_session_cookie_is_redacted() -> None:
    headers = redact_sensitive_headers(
        {"Cookie": "twinslkit_auth=secret", "Accept": "application/json"}
    )

    assert headers == {"Cookie": "***REDACTED***", "Accept": "application/json"}


def test_request_logged_when_enabled(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    """Given CHAT_SYNC_LOG_REQUESTS=true, when a request is made, then it is logged without secrets."""
    monkeypatch.setenv("CHAT_SYNC_LOG_REQUESTS", "true")

    with caplog.at_level(logging.INFO):
        log_api_request(
            "GET",
            "http://x/api/servers",
            params={"userId": "alice"},
            headers={"Cookie": "twinslkit_auth=secret"},
        )

    assert "GET http://x/api/servers?userId=alice" in caplog.text
    assert "secret" not in caplog.text
