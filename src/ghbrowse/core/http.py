"""HTTP client with connection pooling for ghbrowse."""

from contextlib import asynccontextmanager

import httpx

from ghbrowse.config.settings import get_config

GITHUB_MEDIA_TYPE = "application/vnd.github+json"

# Global HTTP client
_client: httpx.AsyncClient | None = None


def get_timeout_config() -> httpx.Timeout:
    """Get timeout configuration from settings."""
    config = get_config()
    return httpx.Timeout(config.api.timeout, connect=10.0)


def get_default_headers() -> dict[str, str]:
    """Headers sent with every GitHub request."""
    config = get_config()
    return {
        "Accept": GITHUB_MEDIA_TYPE,
        "User-Agent": config.api.user_agent,
    }


@asynccontextmanager
async def get_http_client():
    """Get or create the shared HTTP client.

    Usage:
        async with get_http_client() as client:
            response = await client.get(...)
    """
    global _client

    if _client is None:
        limits = httpx.Limits(
            max_connections=20,
            max_keepalive_connections=5,
        )
        _client = httpx.AsyncClient(
            base_url=get_config().api.base_url,
            headers=get_default_headers(),
            timeout=get_timeout_config(),
            limits=limits,
            follow_redirects=True,
        )

    try:
        yield _client
    finally:
        # Don't close - keep for reuse
        pass


async def cleanup() -> None:
    """Close the HTTP client.

    Should be called on application shutdown.
    """
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
