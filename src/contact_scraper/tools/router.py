"""MCP tool definitions for contact scraping."""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from contact_scraper.admin.service import clear_cache
from contact_scraper.cache_manager import get_cache_manager
from contact_scraper.models import BatchScrapeResponse
from contact_scraper.tools.service import batch_scrape_contacts


async def scrape_contacts(
    urls: list[str],
    batch_size: int | None = None,
) -> BatchScrapeResponse:
    """Extract email addresses and social media profile links from websites.

    Each website's home page and its /contact page are scraped. Websites
    are processed in batches; the websites inside a batch are scraped
    concurrently and a short pause separates batches.

    Args:
        urls: Websites to scrape (e.g. "example.com" or "https://example.com")
        batch_size: Number of websites scraped concurrently (default: configured batch size, 5)

    Returns:
        BatchScrapeResponse with one result per website, in input order
    """
    return await batch_scrape_contacts(urls, batch_size)


async def cache_stats() -> dict[str, int | float | str]:
    """Get page cache statistics.

    Returns:
        Dictionary with cache statistics including size, number of entries, and location
    """
    return get_cache_manager().get_stats()


async def cache_clear_expired() -> dict[str, str | int]:
    """Clear expired entries from the page cache.

    Returns:
        Dictionary with the number of expired entries removed
    """
    removed = get_cache_manager().expire()
    return {
        "status": "success",
        "expired_entries_removed": removed,
    }


async def cache_clear_all() -> dict[str, str]:
    """Clear all entries from the page cache.

    Returns:
        Dictionary with operation status
    """
    return clear_cache()


def register_scraping_tools(mcp: FastMCP) -> None:
    """Register contact scraping tools on the MCP server.

    Args:
        mcp: FastMCP server instance to register tools on
    """
    mcp.tool()(scrape_contacts)


def register_cache_tools(mcp: FastMCP) -> None:
    """Register optional cache management tools on the MCP server.

    Args:
        mcp: FastMCP server instance to register tools on
    """
    mcp.tool()(cache_stats)
    mcp.tool()(cache_clear_expired)
    mcp.tool()(cache_clear_all)
