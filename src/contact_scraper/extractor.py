"""Email and social link extraction from HTML pages."""

from __future__ import annotations

import logging
import re
from urllib.parse import unquote, urljoin

from bs4 import BeautifulSoup, Tag

from contact_scraper.models import PageExtraction
from contact_scraper.platforms import match_social_link
from contact_scraper.providers.base import RawPage

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")

# Elements searched for email addresses, in order
EMAIL_SELECTORS: tuple[str, ...] = (
    "body",
    'a[href^="mailto:"]',
    "a",
    ".contact",
    ".email",
    "#contact",
    "#email",
    '[class*="contact"]',
    '[class*="email"]',
    '[id*="contact"]',
    '[id*="email"]',
)

# Meta and link elements that commonly point at a site's social profiles
SOCIAL_META_SELECTOR = (
    'meta[property^="og:"], meta[name^="og:"], '
    'meta[property^="twitter:"], meta[name^="twitter:"], '
    'link[rel~="alternate"]'
)

PLACEHOLDER_LOCAL_PARTS = frozenset(
    {"your", "test", "example", "email", "name", "user", "someone", "yourname", "youremail"}
)
PLACEHOLDER_DOMAINS = frozenset({"domain.com", "yourdomain.com", "email.com"})
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".bmp", ".ico")


class ExtractionError(Exception):
    """Raised when a single selector or element cannot be processed."""


def is_plausible_email(email: str) -> bool:
    """Reject placeholder addresses and image file names that look like emails.

    Args:
        email: A lowercase candidate address

    Returns:
        True if the address should be kept
    """
    if email.endswith(IMAGE_EXTENSIONS):
        return False

    local, _, domain = email.rpartition("@")
    if local in PLACEHOLDER_LOCAL_PARTS or domain in PLACEHOLDER_DOMAINS:
        return False

    return True


def email_from_mailto(href: str) -> str | None:
    """Pull the address out of a ``mailto:`` href.

    Args:
        href: The raw href value

    Returns:
        The lowercase address, or None if the href holds no valid address
    """
    if not href.lower().startswith("mailto:"):
        return None

    address = unquote(href[len("mailto:"):].split("?", 1)[0]).strip().lower()
    if EMAIL_PATTERN.fullmatch(address):
        return address
    return None


def emails_in_text(text: str) -> list[str]:
    """Find all lowercase email addresses in a block of text."""
    return [match.group(0).lower() for match in EMAIL_PATTERN.finditer(text or "")]


def _element_emails(element: Tag) -> list[str]:
    try:
        # Joined text catches addresses split across inline tags
        candidates = emails_in_text(element.get_text(" ")) + emails_in_text(element.get_text())

        href = element.get("href")
        if isinstance(href, str):
            mailto = email_from_mailto(href.strip())
            if mailto:
                candidates.append(mailto)
    except Exception as e:
        raise ExtractionError(f"<{element.name}>: {e}") from e

    return candidates


def extract_emails(soup: BeautifulSoup, extraction: PageExtraction) -> None:
    """Collect email addresses from text and mailto links into ``extraction``.

    A failing selector or element is logged and skipped.
    """
    for selector in EMAIL_SELECTORS:
        try:
            elements = soup.select(selector)
        except Exception as e:
            logger.debug(f"Skipping email selector {selector!r}: {e}")
            continue

        for element in elements:
            try:
                candidates = _element_emails(element)
            except ExtractionError as e:
                logger.debug(f"Skipping element for selector {selector!r}: {e}")
                continue

            for email in candidates:
                if is_plausible_email(email):
                    extraction.add_email(email)


def _add_social_candidate(value: str, extraction: PageExtraction) -> None:
    matched = match_social_link(value)
    if matched:
        platform, url = matched
        extraction.add_social_link(platform, url)


def extract_social_links(soup: BeautifulSoup, base_url: str, extraction: PageExtraction) -> None:
    """Collect social profile links into ``extraction``.

    Anchor hrefs are resolved against ``base_url``; og:/twitter: meta tags
    and alternate link elements are checked as-is.
    """
    for anchor in soup.find_all("a", href=True):
        try:
            href = anchor["href"].strip()
            if not href:
                continue
            _add_social_candidate(urljoin(base_url, href), extraction)
        except Exception as e:
            logger.debug(f"Skipping link {anchor.get('href')!r}: {e}")

    try:
        meta_elements = soup.select(SOCIAL_META_SELECTOR)
    except Exception as e:
        logger.debug(f"Skipping social meta selector: {e}")
        return

    for element in meta_elements:
        try:
            content = element.get("content") or element.get("href")
            if isinstance(content, str) and content.strip():
                _add_social_candidate(content.strip(), extraction)
        except Exception as e:
            logger.debug(f"Skipping meta element {element.name}: {e}")


def extract_contacts(html: str, base_url: str) -> PageExtraction:
    """Extract emails and social links from an HTML document.

    Args:
        html: The HTML content to process
        base_url: URL of the page, used to resolve relative links

    Returns:
        PageExtraction with deduplicated emails and social links
    """
    soup = BeautifulSoup(html or "", "lxml")
    extraction = PageExtraction()

    extract_emails(soup, extraction)
    extract_social_links(soup, base_url, extraction)

    return extraction


def extract_page(page: RawPage) -> PageExtraction:
    """Extract contact data from a fetched page."""
    return extract_contacts(page.content, page.url)
