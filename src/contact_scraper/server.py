"""MCP server exposing contact scraping over MCP tools and plain HTTP."""

from __future__ import annotations

import os

from mcp.server.fastmcp import FastMCP

from contact_scraper.admin.router import (
    api_cache_clear,
    api_config_get,
    api_config_update,
    api_stats,
    health_check,
)
from contact_scraper.api.router import SCRAPE_METHODS, api_scrape
from contact_scraper.tools.router import register_cache_tools, register_scraping_tools

# Set ENABLE_CACHE_TOOLS=true to expose cache_stats, cache_clear_expired, and cache_clear_all
ENABLE_CACHE_TOOLS = os.getenv("ENABLE_CACHE_TOOLS", "false").lower() in ("true", "1", "yes")


def create_server() -> FastMCP:
    """Create the MCP server with all tools and HTTP routes registered."""
    mcp = FastMCP(
        "Contact Scraper",
        instructions=(
            "Extracts email addresses and social media profile links "
            "(Facebook, Instagram, LinkedIn, YouTube, Twitter/X, TikTok, WhatsApp, Telegram) "
            "from a list of websites, checking each site's home page and /contact page."
        ),
        stateless_http=True,
    )

    register_scraping_tools(mcp)
    if ENABLE_CACHE_TOOLS:
        register_cache_tools(mcp)

    mcp.custom_route("/scrape", methods=SCRAPE_METHODS)(api_scrape)
    mcp.custom_route("/healthz", methods=["GET"])(health_check)
    mcp.custom_route("/api/stats", methods=["GET"])(api_stats)
    mcp.custom_route("/api/config", methods=["GET"])(api_config_get)
    mcp.custom_route("/api/config", methods=["POST"])(api_config_update)
    mcp.custom_route("/api/cache/clear", methods=["POST"])(api_cache_clear)

    return mcp


mcp = create_server()


def run_server(transport: str = "streamable-http", host: str = "0.0.0.0", port: int = 8000) -> None:
    """Run the MCP server.

    Args:
        transport: Transport type ('streamable-http' or 'sse')
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 8000)
    """
    mcp.settings.host = host
    mcp.settings.port = port

    mcp.run(transport=transport)
