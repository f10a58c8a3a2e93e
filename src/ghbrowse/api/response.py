"""Typed results of remote calls.

Every call to the GitHub API ends up as exactly one of ApiSuccessResponse,
ApiEmptyResponse or ApiErrorResponse.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Generic, TypeVar, Union

import httpx
import msgspec

from ghbrowse.errors.http import extract_error_message, get_rate_limit_reset

T = TypeVar("T")

logger = logging.getLogger(__name__)

LINK_PATTERN = re.compile(r'<([^>]*)>\s*;\s*rel="([a-zA-Z0-9]+)"')
PAGE_PATTERN = re.compile(r"\bpage=(\d+)")
NEXT_LINK = "next"


def parse_link_header(header: str | None) -> dict[str, str]:
    """Map each ``rel`` of a Link header to its URL."""
    if not header:
        return {}
    return {rel: url for url, rel in LINK_PATTERN.findall(header)}


class ApiSuccessResponse(msgspec.Struct, Generic[T], frozen=True):
    """2xx response with a body."""

    body: T
    links: dict[str, str] = msgspec.field(default_factory=dict)

    @property
    def next_page(self) -> int | None:
        """Page number of the ``next`` link, if the response has one."""
        next_link = self.links.get(NEXT_LINK)
        if next_link is None:
            return None
        match = PAGE_PATTERN.search(next_link)
        if match is None:
            logger.warning("cannot parse next page from %s", next_link)
            return None
        return int(match.group(1))


class ApiEmptyResponse(msgspec.Struct, frozen=True):
    """2xx response without a body (e.g. 204)."""


class ApiErrorResponse(msgspec.Struct, frozen=True):
    """Error status or transport failure.

    status_code is None when the request never got a response.
    rate_limit_reset is set when the call was refused because the API rate
    limit ran out.
    """

    error_message: str
    status_code: int | None = None
    rate_limit_reset: datetime | None = None


ApiResponse = Union[ApiSuccessResponse[T], ApiEmptyResponse, ApiErrorResponse]


def create_api_response(response: httpx.Response, body_type: type[T]) -> ApiResponse[T]:
    """Turn an httpx response into an ApiResponse, decoding the body as ``body_type``.

    Raises msgspec.DecodeError / msgspec.ValidationError when a 2xx body does
    not match ``body_type``.
    """
    if response.is_success:
        if response.status_code == 204 or not response.content:
            return ApiEmptyResponse()
        body = msgspec.json.decode(response.content, type=body_type)
        return ApiSuccessResponse(
            body=body,
            links=parse_link_header(response.headers.get("link")),
        )

    message = extract_error_message(response) or "unknown error"
    return ApiErrorResponse(
        error_message=message,
        status_code=response.status_code,
        rate_limit_reset=_exhausted_rate_limit_reset(response),
    )


def _exhausted_rate_limit_reset(response: httpx.Response) -> datetime | None:
    # GitHub sends the reset header on every response; only trust it when
    # the request was actually refused for the limit
    if response.status_code not in (403, 429):
        return None
    if response.status_code == 403 and response.headers.get("X-RateLimit-Remaining") != "0":
        return None
    return get_rate_limit_reset(response)


def api_error_from_exception(exc: BaseException) -> ApiErrorResponse:
    """ApiErrorResponse for a request that failed before producing a response."""
    from ghbrowse.errors.classify import classify_exception

    message = str(exc) or classify_exception(exc).message or "unknown error"
    return ApiErrorResponse(error_message=message)
