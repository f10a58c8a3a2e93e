"""GitHub API access."""

from ghbrowse.api.response import (
    ApiEmptyResponse,
    ApiErrorResponse,
    ApiResponse,
    ApiSuccessResponse,
    api_error_from_exception,
    create_api_response,
    parse_link_header,
)
from ghbrowse.api.service import ApiCallLiveData, GithubService

__all__ = [
    "ApiCallLiveData",
    "ApiEmptyResponse",
    "ApiErrorResponse",
    "ApiResponse",
    "ApiSuccessResponse",
    "GithubService",
    "api_error_from_exception",
    "create_api_response",
    "parse_link_header",
]
