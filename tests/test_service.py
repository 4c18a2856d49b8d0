"""Tests for per-target scraping, page merging and batch orchestration."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from unittest.mock import AsyncMock, call, patch

import pytest

from contact_scraper.metrics import get_metrics
from contact_scraper.models import BatchProgress, PageExtraction, Platform, ScrapeResult
from contact_scraper.providers import FetchError, RawPage
from contact_scraper.tools import (
    batch_scrape_contacts,
    iter_scrape_batches,
    merge_extractions,
    partition,
    scrape_batch,
    scrape_contacts,
    scrape_target,
)
from contact_scraper.urls import to_http

from conftest import FakeProvider

SIMPLE_PAGE = "<html><body><p>hello@{host}</p><a href='https://instagram.com/{host}'>ig</a></body></html>"


def simple_pages(*hosts: str) -> dict[str, str]:
    return {f"https://{host}": SIMPLE_PAGE.format(host=host) for host in hosts}


class HttpOnlyProvider(FakeProvider):
    """Serves https URLs from their http pages, as after a scheme fallback."""

    async def fetch(self, url: str) -> RawPage | FetchError:
        if not url.startswith("https://"):
            return await super().fetch(url)

        self.fetched.append(url)
        page = await super().fetch(to_http(url))
        self.fetched.pop()
        if isinstance(page, RawPage):
            page.requested_url = url
        return page


class TestMergeExtractions:
    """Tests for merging main and contact page extractions."""

    def test_union_in_first_seen_order(self) -> None:
        """Test that main page entries come first and duplicates are dropped."""
        main = PageExtraction(
            emails=["sales@acme.io", "info@acme.io"],
            social_links={Platform.TWITTER: ["https://twitter.com/acme"], Platform.FACEBOOK: []},
        )
        contact = PageExtraction(
            emails=["info@acme.io", "press@acme.io"],
            social_links={
                Platform.TWITTER: ["https://twitter.com/ACME", "https://twitter.com/acme_help"],
                Platform.FACEBOOK: ["https://facebook.com/acme"],
            },
        )

        result = merge_extractions("https://acme.io", main, contact)

        assert result.url == "https://acme.io"
        assert result.emails == ["sales@acme.io", "info@acme.io", "press@acme.io"]
        assert result.social_links == {
            "facebook": ["https://facebook.com/acme"],
            "twitter": ["https://twitter.com/acme", "https://twitter.com/acme_help"],
        }
        assert result.error is None

    def test_platform_keys_in_priority_order(self) -> None:
        """Test that platforms appear in the fixed priority order."""
        main = PageExtraction(
            social_links={
                Platform.TELEGRAM: ["https://t.me/acme"],
                Platform.FACEBOOK: ["https://facebook.com/acme"],
                Platform.YOUTUBE: ["https://youtube.com/acme"],
            }
        )

        result = merge_extractions("https://acme.io", main)

        assert list(result.social_links) == ["facebook", "youtube", "telegram"]

    def test_missing_contact_page(self) -> None:
        """Test that an absent contact page is treated as empty."""
        main = PageExtraction(emails=["a@acme.io"])

        result = merge_extractions("https://acme.io", main, None)

        assert result.emails == ["a@acme.io"]
        assert result.social_links == {}
        assert result.error is None

    def test_no_empty_platform_entries(self) -> None:
        """Test that platforms with no links are left out."""
        main = PageExtraction(social_links={platform: [] for platform in Platform})

        result = merge_extractions("https://acme.io", main, PageExtraction())

        assert result.social_links == {}

    def test_response_shape(self) -> None:
        """Test the JSON shape handed to HTTP callers."""
        main = PageExtraction(emails=["a@acme.io"], social_links={Platform.TIKTOK: ["https://tiktok.com/@acme"]})

        response = merge_extractions("https://acme.io", main).to_response()

        assert response == {
            "url": "https://acme.io",
            "emails": ["a@acme.io"],
            "socialLinks": {"tiktok": ["https://tiktok.com/@acme"]},
        }


class TestScrapeTarget:
    """Tests for scraping a single target."""

    @pytest.mark.asyncio
    async def test_main_and_contact_page_merged(self, contact_html: str, contact_page_html: str) -> None:
        """Test a target whose home and contact pages both load."""
        provider = FakeProvider(pages={"https://acme.io": contact_html, "https://acme.io/contact": contact_page_html})

        result = await scrape_target("Acme.io/", provider)

        assert provider.fetched == ["https://acme.io", "https://acme.io/contact"]
        assert result.url == "https://acme.io"
        assert result.error is None
        assert result.emails == ["sales@acme.io", "support@acme.io", "hello@acme.io", "press@acme.io"]
        assert list(result.social_links) == [
            "facebook",
            "instagram",
            "linkedin",
            "youtube",
            "twitter",
            "tiktok",
            "whatsapp",
            "telegram",
        ]
        assert result.social_links["instagram"] == ["https://instagram.com/acme.widgets"]
        assert result.social_links["twitter"] == ["https://twitter.com/AcmeWidgets", "https://twitter.com/acme_support"]

    @pytest.mark.asyncio
    async def test_contact_page_failure_is_ignored(self, contact_html: str) -> None:
        """Test that a missing contact page does not set an error."""
        provider = FakeProvider(pages={"https://acme.io": contact_html})

        result = await scrape_target("acme.io", provider)

        assert result.error is None
        assert result.emails == ["sales@acme.io", "support@acme.io", "hello@acme.io"]

    @pytest.mark.asyncio
    async def test_contact_page_follows_http_fallback(self, contact_html: str, contact_page_html: str) -> None:
        """Test that the contact page is requested over http once the main page needed it."""
        provider = HttpOnlyProvider(
            pages={"http://acme.io": contact_html, "http://acme.io/contact": contact_page_html}
        )

        result = await scrape_target("acme.io", provider)

        assert provider.fetched == ["https://acme.io", "http://acme.io/contact"]
        assert result.url == "https://acme.io"
        assert "press@acme.io" in result.emails

    @pytest.mark.asyncio
    async def test_main_page_failure(self) -> None:
        """Test that an unreachable main page yields an error result."""
        provider = FakeProvider(failures={"https://down.example"})

        result = await scrape_target("down.example", provider)

        assert result.url == "https://down.example"
        assert result.error is not None
        assert result.error.startswith("FetchError")
        assert result.emails == []
        assert result.social_links == {}
        assert provider.fetched == ["https://down.example"]

    @pytest.mark.asyncio
    async def test_malformed_target(self) -> None:
        """Test that a malformed target fails on its own without fetching."""
        provider = FakeProvider()

        result = await scrape_target("ftp://files.example.com", provider)

        assert result.error is not None
        assert result.error.startswith("NormalizationError")
        assert result.url == "ftp://files.example.com"
        assert provider.fetched == []

    @pytest.mark.asyncio
    async def test_extraction_crash_is_contained(self) -> None:
        """Test that an unexpected extraction failure becomes the target's error."""
        provider = FakeProvider(pages=simple_pages("acme.io"))

        with patch("contact_scraper.tools.service.extract_page", side_effect=RuntimeError("parser exploded")):
            result = await scrape_target("acme.io", provider)

        assert result.error == "RuntimeError: parser exploded"
        assert result.emails == []

    @pytest.mark.asyncio
    async def test_failure_recorded_in_metrics(self) -> None:
        """Test that failed targets show up in the metrics."""
        metrics = get_metrics()
        failed_before = metrics.failed_targets

        await scrape_target("refused.example", FakeProvider())

        assert metrics.failed_targets == failed_before + 1
        assert metrics.recent_errors[-1].url == "https://refused.example"
        assert metrics.recent_errors[-1].attempts == 3


class TestPartition:
    """Tests for batch partitioning."""

    def test_last_batch_smaller(self) -> None:
        batches = partition([f"site{i}.com" for i in range(12)], 5)

        assert [len(batch) for batch in batches] == [5, 5, 2]
        assert batches[2] == [(10, "site10.com"), (11, "site11.com")]

    def test_empty(self) -> None:
        assert partition([], 5) == []


class TestScrapeBatch:
    """Tests for the batch orchestrator."""

    @pytest.mark.asyncio
    async def test_twelve_urls_in_three_batches(self) -> None:
        """Test batch sizes and progress for 12 targets with batch size 5."""
        hosts = [f"site{i}.com" for i in range(12)]
        provider = FakeProvider(pages=simple_pages(*hosts))
        progress: list[BatchProgress] = []

        results = await scrape_batch(hosts, 5, provider=provider, batch_delay=0, on_progress=progress.append)

        assert [p.completed_targets for p in progress] == [5, 10, 12]
        assert all(p.total_targets == 12 for p in progress)
        assert progress[-1].done
        assert [r.url for r in results] == [f"https://{host}" for host in hosts]
        assert all(r.emails == [f"hello@{host}"] for r, host in zip(results, hosts))

    @pytest.mark.asyncio
    async def test_streaming_updates(self) -> None:
        """Test that each batch is yielded with original input positions."""
        hosts = [f"site{i}.com" for i in range(7)]
        provider = FakeProvider(pages=simple_pages(*hosts))

        updates = [update async for update in iter_scrape_batches(hosts, 3, provider=provider, batch_delay=0)]

        assert [update.batch_index for update in updates] == [0, 1, 2]
        assert all(update.batch_count == 3 for update in updates)
        assert [[index for index, _ in update.results] for update in updates] == [[0, 1, 2], [3, 4, 5], [6]]
        assert [update.progress.completed_targets for update in updates] == [3, 6, 7]

    @pytest.mark.asyncio
    async def test_order_preserved_when_completion_differs(self) -> None:
        """Test that results follow input order even if later targets finish first."""
        hosts = ["slow.com", "medium.com", "fast.com"]
        provider = FakeProvider(
            pages=simple_pages(*hosts),
            delays={"https://slow.com": 0.05, "https://medium.com": 0.02},
        )

        results = await scrape_batch(hosts, 3, provider=provider, batch_delay=0)

        assert [r.url for r in results] == ["https://slow.com", "https://medium.com", "https://fast.com"]

    @pytest.mark.asyncio
    async def test_concurrency_bounded_by_batch_size(self) -> None:
        """Test that targets within a batch overlap but never exceed the batch size."""
        hosts = [f"site{i}.com" for i in range(6)]
        provider = FakeProvider(
            pages=simple_pages(*hosts),
            delays={f"https://{host}": 0.01 for host in hosts},
        )

        await scrape_batch(hosts, 2, provider=provider, batch_delay=0)

        assert provider.max_in_flight == 2

    @pytest.mark.asyncio
    async def test_batch_size_defaults_to_runtime_config(self, runtime_config: dict) -> None:
        """Test that an omitted batch size follows the configured batch_size."""
        runtime_config["batch_size"] = 2
        hosts = [f"site{i}.com" for i in range(5)]
        provider = FakeProvider(pages=simple_pages(*hosts))

        updates = [update async for update in iter_scrape_batches(hosts, provider=provider, batch_delay=0)]

        assert [len(update.results) for update in updates] == [2, 2, 1]

    @pytest.mark.asyncio
    async def test_failing_target_isolated(self) -> None:
        """Test that one refused host does not affect the rest of its batch."""
        hosts = ["good1.com", "refused.com", "good2.com"]
        provider = FakeProvider(pages=simple_pages("good1.com", "good2.com"), failures={"https://refused.com"})

        results = await scrape_batch(hosts, 5, provider=provider, batch_delay=0)

        assert len(results) == 3
        assert results[0].success and results[2].success
        assert results[1].error is not None
        assert results[1].emails == [] and results[1].social_links == {}
        assert results[0].social_links == {"instagram": ["https://instagram.com/good1.com"]}

    @pytest.mark.asyncio
    async def test_one_result_per_input_including_invalid(self) -> None:
        """Test that malformed entries still produce a result entry."""
        provider = FakeProvider(pages=simple_pages("acme.io"))

        results = await scrape_batch(["acme.io", "", 42], 5, provider=provider, batch_delay=0)

        assert len(results) == 3
        assert results[0].success
        assert results[1].error and results[2].error
        assert results[2].url == "42"

    @pytest.mark.asyncio
    async def test_delay_between_batches_only(self) -> None:
        """Test that the delay runs between batches but not after the last."""
        hosts = [f"site{i}.com" for i in range(12)]
        provider = FakeProvider(pages=simple_pages(*hosts))

        with patch("contact_scraper.tools.service.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            await scrape_batch(hosts, 5, provider=provider, batch_delay=1.0)

        assert mock_sleep.await_args_list == [call(1.0), call(1.0)]

    @pytest.mark.asyncio
    async def test_delay_from_config(self, runtime_config: dict) -> None:
        """Test that the configured delay is used by default."""
        runtime_config["batch_delay"] = 0.25
        provider = FakeProvider(pages=simple_pages("a.com", "b.com"))

        with patch("contact_scraper.tools.service.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            await scrape_batch(["a.com", "b.com"], 1, provider=provider)

        mock_sleep.assert_awaited_once_with(0.25)

    @pytest.mark.asyncio
    async def test_empty_input(self) -> None:
        """Test that no targets means no batches and no results."""
        progress: list[BatchProgress] = []

        results = await scrape_batch([], 5, provider=FakeProvider(), batch_delay=0, on_progress=progress.append)

        assert results == []
        assert progress == []

    @pytest.mark.asyncio
    async def test_current_run_tracked_in_metrics(self) -> None:
        """Test that the run's progress is visible through the metrics."""
        provider = FakeProvider(pages=simple_pages("a.com", "b.com", "c.com"))

        await scrape_batch(["a.com", "b.com", "c.com"], 2, provider=provider, batch_delay=0)

        current = get_metrics().current_progress
        assert current is not None
        assert (current.total_targets, current.completed_targets) == (3, 3)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("batch_size", [0, -1, "5", 2.5, True])
    async def test_invalid_batch_size(self, batch_size: object) -> None:
        with pytest.raises(ValueError):
            await scrape_batch(["a.com"], batch_size, provider=FakeProvider())

    @pytest.mark.asyncio
    async def test_urls_must_be_list(self) -> None:
        with pytest.raises(TypeError):
            await scrape_batch("a.com", 5, provider=FakeProvider())

    @pytest.mark.asyncio
    async def test_cancellation_stops_run(self) -> None:
        """Test that cancelling a run cancels in-flight fetches and launches no more batches."""
        hosts = [f"site{i}.com" for i in range(4)]
        provider = FakeProvider(pages=simple_pages(*hosts), delays={f"https://{host}": 10 for host in hosts})

        task = asyncio.create_task(scrape_batch(hosts, 2, provider=provider, batch_delay=0))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert provider.fetched == ["https://site0.com", "https://site1.com"]
        assert provider.in_flight == 0


class TestScrapeContactsTool:
    """Tests for the scrape_contacts MCP tool."""

    @pytest.mark.asyncio
    async def test_summary_counts(self) -> None:
        """Test that the tool response counts successes and failures."""
        results = [
            ScrapeResult(url="https://a.com", emails=["x@a.com"]),
            ScrapeResult(url="https://b.com", error="FetchError: refused"),
        ]

        with patch("contact_scraper.tools.service.scrape_batch", new=AsyncMock(return_value=results)) as mock_batch:
            response = await scrape_contacts(["a.com", "b.com"], batch_size=2)

        mock_batch.assert_awaited_once_with(["a.com", "b.com"], 2)
        assert (response.total, response.successful, response.failed) == (2, 1, 1)
        assert response.results == results

    @pytest.mark.asyncio
    async def test_batch_scrape_contacts_default_batch_size(self) -> None:
        with patch("contact_scraper.tools.service.scrape_batch", new=AsyncMock(return_value=[])) as mock_batch:
            response = await batch_scrape_contacts(["a.com"])

        mock_batch.assert_awaited_once_with(["a.com"], None)
        assert response.total == 0
