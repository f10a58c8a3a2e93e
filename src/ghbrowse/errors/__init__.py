"""Error handling for ghbrowse."""

from ghbrowse.errors.classify import classify_api_error, classify_exception
from ghbrowse.errors.http import extract_error_message, get_rate_limit_reset
from ghbrowse.errors.types import (
    HTTP_ERROR_MAPPINGS,
    ConfigError,
    ErrorCategory,
    ErrorSeverity,
    GhBrowseError,
    HTTPErrorMapping,
    classify_http_error,
)

__all__ = [
    # Core types
    "ErrorCategory",
    "ErrorSeverity",
    "GhBrowseError",
    "ConfigError",
    "HTTPErrorMapping",
    "HTTP_ERROR_MAPPINGS",
    # Classification functions
    "classify_http_error",
    "classify_exception",
    "classify_api_error",
    # HTTP utilities
    "extract_error_message",
    "get_rate_limit_reset",
]
