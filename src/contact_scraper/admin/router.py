"""Admin API routes for stats, config, and cache management."""

from __future__ import annotations

import logging

from starlette.requests import Request
from starlette.responses import JSONResponse

from contact_scraper.admin.service import (
    clear_cache,
    get_current_config,
    get_stats,
    update_config,
)
from contact_scraper.core.providers import reset_provider

logger = logging.getLogger(__name__)


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint for container orchestration.

    Returns:
        JSONResponse with status: healthy
    """
    return JSONResponse({"status": "healthy"})


async def api_stats(request: Request) -> JSONResponse:
    """Get scraper statistics and metrics as JSON.

    Returns:
        JSONResponse with target metrics, current run progress and cache stats
    """
    return JSONResponse(get_stats())


async def api_cache_clear(request: Request) -> JSONResponse:
    """Clear all cache entries.

    Returns:
        JSONResponse with operation status
    """
    try:
        return JSONResponse(clear_cache())
    except Exception as e:
        logger.error(f"Cache clear failed: {e}")
        return JSONResponse({"status": "error", "message": str(e)}, status_code=500)


async def api_config_get(request: Request) -> JSONResponse:
    """Get current runtime configuration.

    Returns:
        JSONResponse with current config values
    """
    return JSONResponse(get_current_config())


async def api_config_update(request: Request) -> JSONResponse:
    """Update runtime configuration.

    The shared provider is rebuilt on next use so fetch settings apply
    to subsequent runs.

    Returns:
        JSONResponse with operation status
    """
    try:
        body = await request.json()
        config_updates = body.get("config", {}) if isinstance(body, dict) else {}
        result = update_config(config_updates)
        if result["updated"]:
            reset_provider()
        return JSONResponse(result)
    except Exception as e:
        logger.error(f"Config update failed: {e}")
        return JSONResponse({"status": "error", "message": str(e)}, status_code=500)
