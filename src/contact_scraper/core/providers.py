"""Provider initialization for the contact scraper."""

from __future__ import annotations

from contact_scraper.admin.service import get_config
from contact_scraper.cache_manager import get_cache_manager
from contact_scraper.providers import ContactPageProvider, RequestsProvider, RetryPolicy


def build_provider() -> RequestsProvider:
    """Create a provider from the current runtime configuration."""
    return RequestsProvider(
        retry_policy=RetryPolicy(
            max_attempts=get_config("max_attempts"),
            timeout=get_config("attempt_timeout"),
            final_timeout=get_config("final_attempt_timeout"),
            backoff=get_config("backoff_seconds"),
        ),
        max_redirects=get_config("max_redirects"),
        verify_ssl=get_config("verify_ssl"),
        cache_manager=get_cache_manager() if get_config("cache_enabled") else None,
        cache_ttl=get_config("cache_ttl"),
    )


_default_provider: ContactPageProvider | None = None


def get_provider() -> ContactPageProvider:
    """Get the shared provider, creating it on first use."""
    global _default_provider

    if _default_provider is None:
        _default_provider = build_provider()

    return _default_provider


def reset_provider() -> None:
    """Drop the shared provider so the next call picks up new configuration."""
    global _default_provider
    _default_provider = None
