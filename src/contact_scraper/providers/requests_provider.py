"""Page fetcher using the requests library with retries and protocol fallback."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from urllib.parse import urlparse

import requests

from contact_scraper.cache_manager import DEFAULT_TTL, CacheManager
from contact_scraper.providers.base import ContactPageProvider, FetchAttempt, FetchError, RawPage
from contact_scraper.urls import to_http

logger = logging.getLogger(__name__)

# Desktop browser user agents, one is picked at random for every attempt
USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:133.0) Gecko/20100101 Firefox/133.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/18.1 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36 Edg/131.0.0.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
)

BROWSER_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "max-age=0",
}

# Responses below this status are parsed, anything at or above is retried
SERVER_ERROR_STATUS = 500


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt count, timeout schedule and linear backoff for one fetch."""

    max_attempts: int = 3
    timeout: float = 10.0
    final_timeout: float = 20.0
    backoff: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def timeout_for(self, attempt: int) -> float:
        """Timeout for a 1-based attempt number; the last attempt gets the longer one."""
        return self.final_timeout if attempt >= self.max_attempts else self.timeout

    def delay_after(self, attempt: int) -> float:
        """Seconds to wait after a failed 1-based attempt."""
        return attempt * self.backoff


class RequestsProvider(ContactPageProvider):
    """Page fetcher with user-agent rotation, retries and an https to http fallback."""

    def __init__(
        self,
        retry_policy: RetryPolicy | None = None,
        max_redirects: int = 5,
        verify_ssl: bool = True,
        cache_manager: CacheManager | None = None,
        cache_ttl: int = DEFAULT_TTL,
        user_agents: tuple[str, ...] = USER_AGENTS,
    ) -> None:
        """Initialize the requests provider.

        Args:
            retry_policy: Attempts, timeouts and backoff (default: 3 attempts, 10s/10s/20s, 1s linear backoff)
            max_redirects: Maximum redirect hops followed per request (default: 5)
            verify_ssl: Verify TLS certificates (default: True)
            cache_manager: Optional page cache, disabled when None
            cache_ttl: Seconds a cached page stays valid (default: 3600)
            user_agents: Pool of user agent strings to rotate through
        """
        if not user_agents:
            raise ValueError("user_agents must not be empty")

        self.retry_policy = retry_policy or RetryPolicy()
        self.max_redirects = max_redirects
        self.verify_ssl = verify_ssl
        self.cache_manager = cache_manager
        self.cache_ttl = cache_ttl
        self.user_agents = user_agents

        self.session = requests.Session()
        self.session.max_redirects = max_redirects

        logger.info(
            f"RequestsProvider initialized (attempts={self.retry_policy.max_attempts}, "
            f"max_redirects={max_redirects}, cache={'enabled' if cache_manager else 'disabled'})"
        )

    def supports_url(self, url: str) -> bool:
        """Check if this provider supports the given URL.

        Args:
            url: The URL to check

        Returns:
            True if the URL uses http or https scheme and has a host
        """
        try:
            parsed = urlparse(url)
            return parsed.scheme in ("http", "https") and bool(parsed.netloc)
        except Exception:
            return False

    def build_headers(self) -> dict[str, str]:
        """Browser-like request headers with a randomly chosen user agent."""
        return {**BROWSER_HEADERS, "User-Agent": random.choice(self.user_agents)}

    async def fetch(self, url: str) -> RawPage | FetchError:
        """Fetch a page, retrying and falling back from https to http.

        Args:
            url: The absolute URL to fetch

        Returns:
            RawPage for any response below 500, FetchError once all attempts
            against the URL (and its http equivalent) have failed
        """
        if not self.supports_url(url):
            return FetchError(url=url, reason=f"Unsupported URL: {url}")

        if self.cache_manager is not None:
            cached = self.cache_manager.get(url)
            if isinstance(cached, RawPage):
                cached.metadata["from_cache"] = True
                return cached

        result = await self._fetch_with_retries(url)

        fallback_url = to_http(url)
        if isinstance(result, FetchError) and fallback_url:
            logger.warning(f"Fetching {url} failed ({result.reason}), falling back to {fallback_url}")
            fallback = await self._fetch_with_retries(fallback_url)
            attempts = result.attempts + fallback.attempts

            if isinstance(fallback, RawPage):
                fallback.requested_url = url
                fallback.attempts = attempts
                result = fallback
            else:
                result = FetchError(
                    url=url,
                    reason=f"{result.reason} (http fallback: {fallback.reason})",
                    attempts=attempts,
                )

        if isinstance(result, RawPage) and self.cache_manager is not None:
            self.cache_manager.set(url, result, expire=self.cache_ttl)

        return result

    async def _fetch_with_retries(self, url: str) -> RawPage | FetchError:
        """Run the retry policy against a single URL."""
        policy = self.retry_policy
        attempts: list[FetchAttempt] = []

        for attempt in range(1, policy.max_attempts + 1):
            timeout = policy.timeout_for(attempt)
            headers = self.build_headers()
            started = time.monotonic()

            try:
                # Run requests in thread pool to avoid blocking
                loop = asyncio.get_event_loop()
                response = await loop.run_in_executor(
                    None,
                    lambda: self.session.get(
                        url,
                        headers=headers,
                        timeout=timeout,
                        allow_redirects=True,
                        verify=self.verify_ssl,
                    ),
                )
            except requests.RequestException as e:
                attempts.append(
                    FetchAttempt(
                        url=url,
                        elapsed_ms=(time.monotonic() - started) * 1000,
                        error=f"{type(e).__name__}: {e}",
                    )
                )
            else:
                elapsed_ms = (time.monotonic() - started) * 1000
                if response.status_code < SERVER_ERROR_STATUS:
                    attempts.append(FetchAttempt(url=url, status_code=response.status_code, elapsed_ms=elapsed_ms))
                    return RawPage(
                        url=str(response.url or url),
                        content=response.text,
                        status_code=response.status_code,
                        content_type=response.headers.get("Content-Type"),
                        requested_url=url,
                        attempts=attempts,
                        metadata={"elapsed_ms": elapsed_ms, "attempts": attempt, "retries": attempt - 1},
                    )
                attempts.append(
                    FetchAttempt(
                        url=url,
                        status_code=response.status_code,
                        elapsed_ms=elapsed_ms,
                        error=f"HTTP status {response.status_code}",
                    )
                )

            if attempt < policy.max_attempts:
                delay = policy.delay_after(attempt)
                logger.debug(
                    f"Retry attempt {attempt}/{policy.max_attempts} for {url} failed "
                    f"({attempts[-1].error}), retrying after {delay:.2f}s"
                )
                await asyncio.sleep(delay)

        return FetchError(url=url, reason=attempts[-1].error or "Request failed", attempts=attempts)
