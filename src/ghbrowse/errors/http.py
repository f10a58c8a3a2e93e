"""Helpers for reading error details out of GitHub HTTP responses."""

from __future__ import annotations

from datetime import datetime, timezone

import httpx


def extract_error_message(response: httpx.Response) -> str:
    """Extract a meaningful error message from an HTTP response.

    GitHub error bodies look like ``{"message": "...", "documentation_url": ...}``.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("message", "error", "error_description"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value

    text = response.text.strip()
    if text and len(text) < 200:
        return text

    if response.reason_phrase:
        return response.reason_phrase

    return f"HTTP {response.status_code}"


def get_rate_limit_reset(response: httpx.Response) -> datetime | None:
    """When the current rate limit window resets, from X-RateLimit-Reset."""
    reset = response.headers.get("X-RateLimit-Reset")
    if not reset:
        return None

    try:
        return datetime.fromtimestamp(int(reset), tz=timezone.utc)
    except ValueError:
        return None
