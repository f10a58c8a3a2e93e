"""JSON output utilities for ghbrowse."""

from __future__ import annotations

import sys
from datetime import datetime

import msgspec

from ghbrowse.errors.types import GhBrowseError
from ghbrowse.resource import Resource

__all__ = [
    "ErrorData",
    "ErrorResponse",
    "from_ghbrowse_error",
    "output_json",
    "output_json_error",
    "output_json_pretty",
    "resource_to_dict",
]


class ErrorData(msgspec.Struct, frozen=True, omit_defaults=True):
    """Error payload with category, severity and remediation."""

    message: str
    category: str
    severity: str
    remediation: str | None = None
    details: dict | None = None
    timestamp: str = msgspec.field(
        default_factory=lambda: datetime.now().astimezone().isoformat()
    )


class ErrorResponse(msgspec.Struct, frozen=True):
    """Top-level ``{"error": ...}`` document."""

    error: ErrorData


def output_json(data: object) -> None:
    """Write compact JSON for any msgspec-serializable object to stdout."""
    sys.stdout.buffer.write(msgspec.json.encode(data))
    sys.stdout.buffer.write(b"\n")


def output_json_pretty(data: object, indent: int = 2) -> None:
    """Write indented JSON for any msgspec-serializable object to stdout."""
    formatted = msgspec.json.format(msgspec.json.encode(data), indent=indent)
    sys.stdout.write(formatted.decode())
    sys.stdout.write("\n")


def from_ghbrowse_error(error: GhBrowseError) -> ErrorResponse:
    return ErrorResponse(
        error=ErrorData(
            message=error.message,
            category=error.category.value,
            severity=error.severity.value,
            remediation=error.remediation,
            details=error.details,
            timestamp=error.timestamp.isoformat(),
        )
    )


def output_json_error(error: GhBrowseError, indent: int = 2) -> None:
    """Write a structured error document to stdout."""
    output_json_pretty(from_ghbrowse_error(error), indent=indent)


def resource_to_dict(resource: Resource) -> dict:
    """Plain dict for a Resource, without the keys that are unset."""
    data: dict = {"status": resource.status.value}
    if resource.data is not None:
        data["data"] = msgspec.to_builtins(resource.data)
    if resource.message is not None:
        data["message"] = resource.message
    return data
