"""Business logic for contact scraping: per-target scrape, merge and batching."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from contact_scraper.admin.service import get_config
from contact_scraper.core.providers import get_provider
from contact_scraper.extractor import extract_page
from contact_scraper.metrics import get_metrics, record_target
from contact_scraper.models import (
    BatchProgress,
    BatchScrapeResponse,
    PageExtraction,
    Platform,
    ScrapeResult,
)
from contact_scraper.providers import ContactPageProvider, FetchError, FetchFailed
from contact_scraper.urls import NormalizationError, contact_url_of, normalize_url, to_http

logger = logging.getLogger(__name__)


@dataclass
class BatchUpdate:
    """Results of one completed batch, tagged with their input positions."""

    batch_index: int
    batch_count: int
    results: list[tuple[int, ScrapeResult]]
    progress: BatchProgress


def merge_extractions(
    url: str,
    main: PageExtraction,
    contact: PageExtraction | None = None,
) -> ScrapeResult:
    """Merge the main page and contact page extractions into one result.

    Main page entries come first. Platforms without links are left out and
    the remaining platforms keep their fixed priority order.

    Args:
        url: The normalized target URL
        main: Extraction from the main page
        contact: Extraction from the contact page, None if it was not fetched

    Returns:
        ScrapeResult with deduplicated emails and social links
    """
    merged = PageExtraction()

    for extraction in (main, contact or PageExtraction()):
        for email in extraction.emails:
            merged.add_email(email)
        for platform, link in extraction.social_link_pairs():
            merged.add_social_link(platform, link)

    social_links = {
        platform.value: merged.social_links[platform]
        for platform in Platform
        if merged.social_links.get(platform)
    }

    return ScrapeResult(url=url, emails=merged.emails, social_links=social_links)


async def scrape_contact_page(url: str, provider: ContactPageProvider) -> PageExtraction | None:
    """Fetch and extract the contact page of a target.

    Failures are logged and reported as None, never raised.
    """
    contact_url = contact_url_of(url)
    page = await provider.fetch(contact_url)

    if isinstance(page, FetchError):
        logger.warning(f"Contact page unavailable for {url}: {page.reason}")
        return None

    try:
        return extract_page(page)
    except Exception as e:
        logger.warning(f"Could not extract contact page {contact_url}: {type(e).__name__}: {e}")
        return None


async def scrape_target(raw_url: Any, provider: ContactPageProvider) -> ScrapeResult:
    """Scrape one target, converting every per-target failure into ``error``.

    Args:
        raw_url: The caller-supplied target
        provider: The page fetcher to use

    Returns:
        ScrapeResult; ``error`` is set and the lists are empty if the target
        could not be normalized or its main page could not be scraped
    """
    started = time.monotonic()
    attempts = 0

    try:
        url = normalize_url(raw_url)
    except NormalizationError as e:
        error_msg = f"{type(e).__name__}: {e}"
        target = raw_url.strip() if isinstance(raw_url, str) else str(raw_url)
        record_target(url=target, success=False, error=error_msg)
        return ScrapeResult(url=target, error=error_msg)

    try:
        main_page = await provider.fetch(url)
        if isinstance(main_page, FetchError):
            raise FetchFailed(main_page)
        attempts = len(main_page.attempts) or 1

        main = extract_page(main_page)
        # Reuse the scheme the main page was reached with
        contact_base = (to_http(url) or url) if main_page.url.startswith("http://") else url
        contact = await scrape_contact_page(contact_base, provider)
        result = merge_extractions(url, main, contact)
    except FetchFailed as e:
        attempts = len(e.error.attempts) or 1
        error_msg = f"FetchError: {e}"
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
    else:
        record_target(
            url=url,
            success=True,
            emails_found=len(result.emails),
            social_links_found=sum(len(links) for links in result.social_links.values()),
            elapsed_ms=(time.monotonic() - started) * 1000,
            attempts=attempts,
        )
        return result

    logger.warning(f"Failed to scrape {url}: {error_msg}")
    record_target(
        url=url,
        success=False,
        elapsed_ms=(time.monotonic() - started) * 1000,
        attempts=attempts,
        error=error_msg,
    )
    return ScrapeResult(url=url, error=error_msg)


def partition(urls: Sequence[Any], batch_size: int) -> list[list[tuple[int, Any]]]:
    """Split targets into consecutive batches of ``batch_size``, keeping input positions."""
    indexed = list(enumerate(urls))
    return [indexed[start:start + batch_size] for start in range(0, len(indexed), batch_size)]


def _resolve_batch_size(batch_size: Any) -> Any:
    return get_config("batch_size") if batch_size is None else batch_size


def _validate_request(urls: Any, batch_size: Any) -> None:
    if not isinstance(urls, (list, tuple)):
        raise TypeError(f"urls must be a list, got {type(urls).__name__}")
    if not isinstance(batch_size, int) or isinstance(batch_size, bool) or batch_size < 1:
        raise ValueError(f"batch_size must be a positive integer, got {batch_size!r}")


async def iter_scrape_batches(
    urls: Sequence[Any],
    batch_size: int | None = None,
    provider: ContactPageProvider | None = None,
    batch_delay: float | None = None,
) -> AsyncIterator[BatchUpdate]:
    """Scrape targets batch by batch, yielding each batch once it completes.

    Batches run strictly one after another; the targets inside a batch are
    scraped concurrently. A fixed delay separates consecutive batches.

    Args:
        urls: Targets to scrape
        batch_size: Number of targets scraped concurrently (default: from config)
        provider: Page fetcher (default: shared provider)
        batch_delay: Seconds to wait between batches (default: from config)

    Yields:
        BatchUpdate with the batch's results and the run's progress

    Raises:
        TypeError: If urls is not a list
        ValueError: If batch_size is not a positive integer
    """
    batch_size = _resolve_batch_size(batch_size)
    _validate_request(urls, batch_size)

    provider = provider or get_provider()
    delay = get_config("batch_delay") if batch_delay is None else batch_delay
    batches = partition(urls, batch_size)

    progress = BatchProgress(total_targets=len(urls))
    get_metrics().start_run(progress)
    logger.info(f"Scraping {len(urls)} target(s) in {len(batches)} batch(es) of up to {batch_size}")

    for batch_index, batch in enumerate(batches):
        results = await asyncio.gather(*(scrape_target(raw_url, provider) for _, raw_url in batch))
        progress.advance(len(batch))

        logger.info(
            f"Batch {batch_index + 1}/{len(batches)} done "
            f"({progress.completed_targets}/{progress.total_targets} targets)"
        )
        yield BatchUpdate(
            batch_index=batch_index,
            batch_count=len(batches),
            results=[(index, result) for (index, _), result in zip(batch, results)],
            progress=progress.model_copy(),
        )

        if batch_index < len(batches) - 1 and delay > 0:
            await asyncio.sleep(delay)


async def scrape_batch(
    urls: Sequence[Any],
    batch_size: int | None = None,
    provider: ContactPageProvider | None = None,
    batch_delay: float | None = None,
    on_progress: Callable[[BatchProgress], None] | None = None,
) -> list[ScrapeResult]:
    """Scrape all targets and return one result per target, in input order.

    Args:
        urls: Targets to scrape
        batch_size: Number of targets scraped concurrently (default: from config)
        provider: Page fetcher (default: shared provider)
        batch_delay: Seconds to wait between batches (default: from config)
        on_progress: Called with the run's progress after every batch

    Returns:
        List of ScrapeResult, one per input target
    """
    batch_size = _resolve_batch_size(batch_size)
    _validate_request(urls, batch_size)
    results: list[ScrapeResult | None] = [None] * len(urls)

    async for update in iter_scrape_batches(urls, batch_size, provider, batch_delay):
        for index, result in update.results:
            results[index] = result
        if on_progress is not None:
            on_progress(update.progress)

    return [result for result in results if result is not None]


async def batch_scrape_contacts(
    urls: list[str],
    batch_size: int | None = None,
) -> BatchScrapeResponse:
    """Scrape contacts for multiple URLs and summarize the outcome.

    Args:
        urls: List of websites to scrape
        batch_size: Number of websites scraped concurrently (default: from config)

    Returns:
        BatchScrapeResponse with results for all URLs
    """
    results = await scrape_batch(urls, batch_size)
    successful = sum(1 for r in results if r.success)

    return BatchScrapeResponse(
        total=len(results),
        successful=successful,
        failed=len(results) - successful,
        results=results,
    )
