"""Base provider interface for fetching pages."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class FetchAttempt:
    """Record of a single HTTP call made while fetching a page."""

    url: str
    status_code: int | None = None
    elapsed_ms: float | None = None
    error: str | None = None


@dataclass
class RawPage:
    """A successfully fetched page."""

    url: str
    content: str
    status_code: int
    content_type: str | None
    requested_url: str | None = None
    attempts: list[FetchAttempt] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class FetchError:
    """Terminal failure after all retries and fallbacks were exhausted."""

    url: str
    reason: str
    attempts: list[FetchAttempt] = field(default_factory=list)

    def __str__(self) -> str:
        return self.reason


class FetchFailed(Exception):
    """Raised by callers that turn a FetchError into an exception."""

    def __init__(self, error: FetchError) -> None:
        super().__init__(error.reason)
        self.error = error


class ContactPageProvider(ABC):
    """Abstract base class for page fetchers."""

    @abstractmethod
    async def fetch(self, url: str) -> RawPage | FetchError:
        """Fetch a page.

        Args:
            url: The absolute URL to fetch

        Returns:
            RawPage on success, FetchError once every attempt has failed.
            Implementations must not raise for network or HTTP failures.
        """
        pass

    @abstractmethod
    def supports_url(self, url: str) -> bool:
        """Check if this provider supports the given URL.

        Args:
            url: The URL to check

        Returns:
            True if this provider can handle the URL
        """
        pass
