"""Error types and classifications."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

import msgspec


class ErrorCategory(StrEnum):
    """Error categories for handling decisions."""

    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RATE_LIMITED = "rate_limited"
    NETWORK = "network"
    SERVER = "server"
    PARSE = "parse"
    CONFIGURATION = "configuration"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


class ErrorSeverity(StrEnum):
    """Error severity levels."""

    FATAL = "fatal"
    RECOVERABLE = "recoverable"
    TRANSIENT = "transient"


class GhBrowseError(msgspec.Struct, frozen=True):
    """Structured error with category and remediation."""

    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    remediation: str | None = None
    details: dict | None = None
    timestamp: datetime = msgspec.field(
        default_factory=lambda: datetime.now().astimezone()
    )


class ConfigError(Exception):
    """Raised when the configuration file cannot be loaded."""


class HTTPErrorMapping(msgspec.Struct, frozen=True):
    """How an HTTP status code is reported."""

    category: ErrorCategory
    severity: ErrorSeverity
    remediation: str | None = None


HTTP_ERROR_MAPPINGS: dict[int, HTTPErrorMapping] = {
    401: HTTPErrorMapping(
        category=ErrorCategory.AUTHENTICATION,
        severity=ErrorSeverity.RECOVERABLE,
        remediation="Run 'ghbrowse token set' with a valid token.",
    ),
    # GitHub answers 403 when the unauthenticated rate limit is exhausted
    403: HTTPErrorMapping(
        category=ErrorCategory.AUTHORIZATION,
        severity=ErrorSeverity.RECOVERABLE,
        remediation="Check token scopes, or wait for the rate limit to reset.",
    ),
    404: HTTPErrorMapping(
        category=ErrorCategory.NOT_FOUND,
        severity=ErrorSeverity.RECOVERABLE,
    ),
    422: HTTPErrorMapping(
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.FATAL,
        remediation="Check the query syntax.",
    ),
    429: HTTPErrorMapping(
        category=ErrorCategory.RATE_LIMITED,
        severity=ErrorSeverity.TRANSIENT,
        remediation="Wait for the rate limit to reset and try again.",
    ),
    500: HTTPErrorMapping(
        category=ErrorCategory.SERVER,
        severity=ErrorSeverity.TRANSIENT,
    ),
    502: HTTPErrorMapping(
        category=ErrorCategory.SERVER,
        severity=ErrorSeverity.TRANSIENT,
    ),
    503: HTTPErrorMapping(
        category=ErrorCategory.SERVER,
        severity=ErrorSeverity.TRANSIENT,
    ),
    504: HTTPErrorMapping(
        category=ErrorCategory.SERVER,
        severity=ErrorSeverity.TRANSIENT,
    ),
}


def classify_http_error(status_code: int) -> HTTPErrorMapping:
    """Classify an HTTP error by status code."""
    if status_code in HTTP_ERROR_MAPPINGS:
        return HTTP_ERROR_MAPPINGS[status_code]

    if 400 <= status_code < 500:
        return HTTPErrorMapping(
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.RECOVERABLE,
        )
    elif 500 <= status_code < 600:
        return HTTPErrorMapping(
            category=ErrorCategory.SERVER,
            severity=ErrorSeverity.TRANSIENT,
        )
    else:
        return HTTPErrorMapping(
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.RECOVERABLE,
        )
