"""Core infrastructure and shared utilities.

This module provides the single source of truth for the provider instance
used by the scraping tools and the HTTP endpoint. The provider is built
lazily from the runtime configuration and rebuilt after config updates.
"""

from contact_scraper.core.providers import (
    build_provider,
    get_provider,
    reset_provider,
)

__all__ = [
    "build_provider",
    "get_provider",
    "reset_provider",
]
