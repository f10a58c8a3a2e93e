"""Core loading machinery for ghbrowse."""

from ghbrowse.core.bound_resource import NetworkBoundResource
from ghbrowse.core.next_page import FetchNextSearchPageTask
from ghbrowse.core.rate_limiter import RateLimiter

__all__ = [
    "FetchNextSearchPageTask",
    "NetworkBoundResource",
    "RateLimiter",
]
