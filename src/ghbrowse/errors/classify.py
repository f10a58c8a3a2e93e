"""Exception classification for structured error handling."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import msgspec

from ghbrowse.errors.types import (
    ErrorCategory,
    ErrorSeverity,
    GhBrowseError,
    classify_http_error,
)

if TYPE_CHECKING:
    from ghbrowse.api.response import ApiErrorResponse


def classify_api_error(error: ApiErrorResponse) -> GhBrowseError:
    """Classify an error response coming back from the remote service."""
    if error.status_code is None:
        return GhBrowseError(
            message=error.error_message,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.TRANSIENT,
            remediation="Check your internet connection and try again.",
        )

    if error.rate_limit_reset is not None:
        reset = error.rate_limit_reset
        return GhBrowseError(
            message=f"HTTP {error.status_code}: {error.error_message}",
            category=ErrorCategory.RATE_LIMITED,
            severity=ErrorSeverity.TRANSIENT,
            remediation=(
                f"Rate limit resets at {reset:%Y-%m-%d %H:%M:%S} UTC. "
                "Run 'ghbrowse token set' for a higher limit."
            ),
            details={
                "status_code": error.status_code,
                "rate_limit_reset": reset.isoformat(),
            },
        )

    mapping = classify_http_error(error.status_code)
    return GhBrowseError(
        message=f"HTTP {error.status_code}: {error.error_message}",
        category=mapping.category,
        severity=mapping.severity,
        remediation=mapping.remediation,
        details={"status_code": error.status_code},
    )


def classify_exception(e: BaseException) -> GhBrowseError:
    """Classify any exception into a structured error."""

    if isinstance(e, httpx.TimeoutException):
        return GhBrowseError(
            message="Request timed out",
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.TRANSIENT,
            remediation="Check your network connection and try again.",
        )

    if isinstance(e, httpx.ConnectError):
        return GhBrowseError(
            message="Failed to connect to server",
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.TRANSIENT,
            remediation="Check your internet connection. GitHub may be down.",
        )

    if isinstance(e, httpx.HTTPStatusError):
        status = e.response.status_code
        mapping = classify_http_error(status)
        return GhBrowseError(
            message=f"HTTP {status}",
            category=mapping.category,
            severity=mapping.severity,
            remediation=mapping.remediation,
            details={"status_code": status},
        )

    if isinstance(e, httpx.TransportError):
        return GhBrowseError(
            message=str(e) or "Network error",
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.TRANSIENT,
        )

    if isinstance(e, (msgspec.DecodeError, msgspec.ValidationError)):
        return GhBrowseError(
            message=f"Failed to parse response: {e}",
            category=ErrorCategory.PARSE,
            severity=ErrorSeverity.RECOVERABLE,
        )

    if isinstance(e, asyncio.TimeoutError):
        return GhBrowseError(
            message="Operation timed out",
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.TRANSIENT,
        )

    if isinstance(e, PermissionError):
        filename = getattr(e, "filename", None)
        return GhBrowseError(
            message=f"Permission denied: {filename}"
            if filename
            else "Permission denied",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.FATAL,
            remediation="Check file permissions for the ghbrowse config directory.",
        )

    if isinstance(e, OSError):
        return GhBrowseError(
            message=str(e) or "I/O error",
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.TRANSIENT,
        )

    return GhBrowseError(
        message=str(e) or type(e).__name__,
        category=ErrorCategory.UNKNOWN,
        severity=ErrorSeverity.RECOVERABLE,
        details={"type": type(e).__name__},
    )
