"""HTTP API for submitting scrape requests."""

from contact_scraper.api.router import CORS_HEADERS, SCRAPE_METHODS, api_scrape

__all__ = [
    "CORS_HEADERS",
    "SCRAPE_METHODS",
    "api_scrape",
]
