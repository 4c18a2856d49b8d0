"""HTTP endpoint exposing the batch contact scraper."""

from __future__ import annotations

import json
import logging

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from contact_scraper.admin.service import get_config
from contact_scraper.tools.service import scrape_batch

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

# Methods routed to the endpoint so that anything but POST/OPTIONS gets a 405 body
SCRAPE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=CORS_HEADERS)


async def api_scrape(request: Request) -> Response:
    """Scrape contact data for a list of websites.

    Expects a JSON body ``{"urls": [...], "batchSize": 5}`` and returns a
    JSON array with one ``{url, emails, socialLinks, error?}`` object per
    URL, in input order.

    Returns:
        200 with results, 400 for invalid input, 405 for unsupported
        methods, 500 for unexpected failures
    """
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    if request.method != "POST":
        return _error("Method not allowed", 405)

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error("Invalid input: request body must be JSON", 400)

    urls = body.get("urls") if isinstance(body, dict) else None
    if not isinstance(urls, list):
        return _error("Invalid input: urls must be an array", 400)

    batch_size = body.get("batchSize", get_config("batch_size"))
    if not isinstance(batch_size, int) or isinstance(batch_size, bool) or batch_size < 1:
        return _error("Invalid input: batchSize must be a positive integer", 400)

    try:
        results = await scrape_batch(urls, batch_size)
    except Exception as e:
        logger.exception(f"Scrape request failed: {e}")
        return _error(str(e), 500)

    return JSONResponse([result.to_response() for result in results], headers=CORS_HEADERS)
