"""Data models for contact scraping.

This module defines the data structures used throughout the scraper:
- Platform: the fixed set of recognized social media services
- PageExtraction: contact data found on one fetched page
- ScrapeResult: merged, per-target result returned to callers
- BatchProgress: progress counter for a batch run
- BatchScrapeResponse: MCP tool response wrapping all results

Response models use Pydantic v2 for validation and serialization.
"""

from contact_scraper.models.contacts import (
    BatchProgress,
    BatchScrapeResponse,
    PageExtraction,
    Platform,
    ScrapeResult,
)

__all__ = [
    "Platform",
    "PageExtraction",
    "ScrapeResult",
    "BatchProgress",
    "BatchScrapeResponse",
]
