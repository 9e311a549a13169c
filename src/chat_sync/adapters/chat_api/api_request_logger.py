"""Utility for logging chat server requests when CHAT_SYNC_LOG_REQUESTS is enabled."""

import json
import logging
import os
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

_SENSITIVE_HEADERS = {"authorization", "cookie", "set-cookie", "x-api-key"}


def should_log_requests() -> bool:
    """Check if request logging is enabled via CHAT_SYNC_LOG_REQUESTS environment variable."""
    return os.getenv("CHAT_SYNC_LOG_REQUESTS", "").lower() == "true"


def _build_url_with_params(url: str, params: Mapping[str, Any] | None) -> str:
    """Build full URL with query parameters."""
    if not params:
        return url
    param_str = "&".join(f"{k}={v}" for k, v in sorted(params.items()))
    return f"{url}?{param_str}" if "?" not in url else f"{url}&{param_str}"


def redact_sensitive_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Redact session cookies and credentials from headers."""
    return {
        k: "***REDACTED***" if k.lower() in _SENSITIVE_HEADERS else v for k, v in headers.items()
    }


def log_api_request(
    method: str,
    url: str,
    params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
) -> None:
    """Log request details if CHAT_SYNC_LOG_REQUESTS is enabled.

    Args:
        method: HTTP method (GET, POST, etc.).
        url: Request URL.
        params: Query parameters (optional).
        headers: Request headers (optional, sensitive headers are redacted).
    """
    if not should_log_requests():
        return

    log_parts = [f"{method} {_build_url_with_params(url, params)}"]
    if headers:
        log_parts.append(f"Headers: {json.dumps(redact_sensitive_headers(headers), indent=2)}")

    logger.info("API Request:\n" + "\n".join(log_parts))
