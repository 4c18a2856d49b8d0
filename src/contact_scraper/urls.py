"""URL normalization for scrape targets."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlparse

# Matches an explicit scheme such as "http://", "HTTPS://" or "ftp://"
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*://", re.IGNORECASE)

SUPPORTED_SCHEMES = ("http", "https")
CONTACT_PATH = "/contact"


class NormalizationError(ValueError):
    """Raised when a raw target cannot be turned into a fetchable URL."""


def normalize_url(raw: Any) -> str:
    """Canonicalize a raw target into an absolute, lowercase URL.

    Prepends ``https://`` when no scheme is given, lowercases the whole
    string and strips trailing slashes. Reachability is not checked.

    Args:
        raw: The caller-supplied target (e.g. "example.com")

    Returns:
        The normalized URL (e.g. "https://example.com")

    Raises:
        NormalizationError: If the input is not a string or does not parse
            as an http(s) URL with a host
    """
    if not isinstance(raw, str):
        raise NormalizationError(f"URL must be a string, got {type(raw).__name__}")

    candidate = raw.strip()
    if not candidate:
        raise NormalizationError("URL is empty")

    if not _SCHEME_RE.match(candidate):
        candidate = f"https://{candidate}"

    # Trailing whitespace and slashes can alternate ("a.com/ /")
    candidate = candidate.lower()
    stripped = candidate.rstrip().rstrip("/")
    while stripped != candidate:
        candidate = stripped
        stripped = candidate.rstrip().rstrip("/")

    try:
        parsed = urlparse(candidate)
        # Accessing .port validates the port component
        parsed.port
    except ValueError as e:
        raise NormalizationError(f"Malformed URL '{raw}': {e}") from e

    if parsed.scheme not in SUPPORTED_SCHEMES:
        raise NormalizationError(f"Unsupported URL scheme '{parsed.scheme}' in '{raw}'")
    if not parsed.hostname or any(ch.isspace() for ch in parsed.netloc):
        raise NormalizationError(f"Malformed URL '{raw}': missing or invalid host")

    return candidate


def contact_url_of(url: str) -> str:
    """Derive the contact page URL for a normalized URL.

    The contact page is always looked up at the site root, so
    "https://example.com/shop" maps to "https://example.com/contact".
    """
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}{CONTACT_PATH}"


def to_http(url: str) -> str | None:
    """Return the plain-http equivalent of an https URL, or None."""
    if url.startswith("https://"):
        return "http://" + url[len("https://"):]
    return None
