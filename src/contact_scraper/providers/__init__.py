"""Page fetchers for different HTTP backends."""

from contact_scraper.providers.base import (
    ContactPageProvider,
    FetchAttempt,
    FetchError,
    FetchFailed,
    RawPage,
)
from contact_scraper.providers.requests_provider import (
    BROWSER_HEADERS,
    USER_AGENTS,
    RequestsProvider,
    RetryPolicy,
)

__all__ = [
    "ContactPageProvider",
    "FetchAttempt",
    "FetchError",
    "FetchFailed",
    "RawPage",
    "RequestsProvider",
    "RetryPolicy",
    "USER_AGENTS",
    "BROWSER_HEADERS",
]
