"""Pytest configuration and fixtures for contact-scraper tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any
from unittest.mock import Mock

import pytest

from contact_scraper.admin import service as admin_service
from contact_scraper.providers import ContactPageProvider, FetchAttempt, FetchError, RawPage


@pytest.fixture
def contact_html() -> str:
    """Home page with emails, social links and social meta tags."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <title>Acme Widgets</title>
        <meta property="og:title" content="Acme Widgets">
        <meta property="og:see_also" content="https://www.linkedin.com/company/acme-widgets">
        <meta name="twitter:site" content="https://twitter.com/AcmeWidgets">
        <link rel="alternate" href="https://www.youtube.com/channel/UCacme">
        <script>var tracking = "pixel@tracker.png";</script>
    </head>
    <body>
        <header>
            <a href="https://www.facebook.com/acmewidgets">Facebook</a>
            <a href="//instagram.com/acme.widgets/">Instagram</a>
            <a href="/about">About</a>
        </header>
        <main>
            <p>Write to Sales@Acme.io or call us.</p>
            <div class="contact-info">Support: support@acme.io</div>
            <a href="mailto:Hello@Acme.io?subject=Hi">Email us</a>
            <span class="sprite">sprite@2x.png</span>
            <p>Form placeholder: your@email.com</p>
        </main>
        <footer>
            <a href="https://t.me/acmewidgets">Telegram</a>
            <a href="https://www.tiktok.com/@acmewidgets?lang=en">TikTok</a>
            <a href="https://api.whatsapp.com/send?phone=15551234567">WhatsApp</a>
        </footer>
    </body>
    </html>
    """


@pytest.fixture
def contact_page_html() -> str:
    """Contact page repeating some home page data and adding new entries."""
    return """
    <html>
    <body>
        <div id="contact">
            <p>sales@acme.io</p>
            <a href="mailto:press@acme.io">Press</a>
        </div>
        <a href="https://instagram.com/acme.widgets">Instagram</a>
        <a href="https://x.com/acme_support">X</a>
    </body>
    </html>
    """


@pytest.fixture
def make_response() -> Callable[..., Mock]:
    """Factory for mocked requests.Response objects."""

    def factory(
        status_code: int = 200,
        text: str = "<html><body></body></html>",
        url: str = "https://example.com",
        content_type: str = "text/html; charset=utf-8",
    ) -> Mock:
        response = Mock()
        response.status_code = status_code
        response.text = text
        response.url = url
        response.headers = {"Content-Type": content_type}
        return response

    return factory


class FakeProvider(ContactPageProvider):
    """In-memory provider serving canned pages and failures by URL.

    URLs without an entry fail with a connection error. ``delays`` adds a
    per-URL pause so completion order can differ from input order.
    """

    def __init__(
        self,
        pages: dict[str, str] | None = None,
        failures: set[str] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.pages = pages or {}
        self.failures = failures or set()
        self.delays = delays or {}
        self.fetched: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def supports_url(self, url: str) -> bool:
        return url.startswith(("http://", "https://"))

    async def fetch(self, url: str) -> RawPage | FetchError:
        self.fetched.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(url)
            if delay:
                await asyncio.sleep(delay)
        finally:
            self.in_flight -= 1

        if url in self.failures or url not in self.pages:
            attempts = [FetchAttempt(url=url, error="ConnectionError: refused") for _ in range(3)]
            return FetchError(url=url, reason="ConnectionError: refused", attempts=attempts)

        return RawPage(
            url=url,
            content=self.pages[url],
            status_code=200,
            content_type="text/html",
            requested_url=url,
            attempts=[FetchAttempt(url=url, status_code=200, elapsed_ms=1.0)],
        )


@pytest.fixture
def runtime_config() -> Any:
    """Snapshot the runtime config and restore it after the test."""
    snapshot = dict(admin_service._runtime_config)
    yield admin_service._runtime_config
    admin_service._runtime_config.clear()
    admin_service._runtime_config.update(snapshot)
