"""Social media platform matching and profile URL normalization.

Platforms are tried in the order of ``SOCIAL_PLATFORMS``; a link is
assigned to the first platform whose host pattern matches it and is then
rewritten into that platform's canonical profile URL. When no handle can
be pulled out of the link the link itself is kept as-is.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from contact_scraper.models import Platform

# Host boundary: start of string, after "//" or after a subdomain dot
_HOST_PREFIX = r"(?:^|//|\.)"
# Host must be followed by a port, path, query, fragment or the end
_HOST_SUFFIX = r"(?=[:/?#]|$)"


def _host_pattern(*domains: str) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(domain) for domain in domains)
    return re.compile(f"{_HOST_PREFIX}(?:{alternatives}){_HOST_SUFFIX}", re.IGNORECASE)


def _handle_normalizer(pattern: str, template: str) -> Callable[[str], str | None]:
    """Build a normalizer that formats the first captured group into ``template``."""
    compiled = re.compile(pattern, re.IGNORECASE)

    def normalize(url: str) -> str | None:
        match = compiled.search(url)
        if not match or not match.group(1):
            return None
        return template.format(handle=match.group(1))

    return normalize


_LINKEDIN_RE = re.compile(
    r"(?:linkedin\.com|lnkd\.in)/(?:(company|in|school|showcase)/|profile/view\?id=)?([^/?#&]+)",
    re.IGNORECASE,
)
_WHATSAPP_RE = re.compile(r"(?:wa\.me/|phone=)\+?(\d+)", re.IGNORECASE)


def _normalize_linkedin(url: str) -> str | None:
    match = _LINKEDIN_RE.search(url)
    if not match:
        return None
    section, handle = match.groups()
    return f"https://linkedin.com/{(section or 'in').lower()}/{handle}"


def _normalize_whatsapp(url: str) -> str | None:
    match = _WHATSAPP_RE.search(url)
    return f"https://wa.me/{match.group(1)}" if match else None


@dataclass(frozen=True)
class SocialPlatform:
    """One row of the platform table."""

    platform: Platform
    pattern: re.Pattern[str]
    normalizer: Callable[[str], str | None]

    def matches(self, url: str) -> bool:
        return self.pattern.search(url) is not None

    def normalize(self, url: str) -> str:
        """Canonical profile URL, or the original URL if no handle is found."""
        return self.normalizer(url) or url


# Priority order matters: the first matching row wins
SOCIAL_PLATFORMS: tuple[SocialPlatform, ...] = (
    SocialPlatform(
        Platform.FACEBOOK,
        _host_pattern("facebook.com", "fb.com", "fb.me"),
        _handle_normalizer(
            r"(?:facebook\.com|fb\.me|fb\.com)/(profile\.php\?id=\d+|[^/?#]+)",
            "https://facebook.com/{handle}",
        ),
    ),
    SocialPlatform(
        Platform.INSTAGRAM,
        _host_pattern("instagram.com", "instagr.am", "ig.me"),
        _handle_normalizer(r"(?:instagram\.com|instagr\.am|ig\.me)/([^/?#]+)", "https://instagram.com/{handle}"),
    ),
    SocialPlatform(
        Platform.LINKEDIN,
        _host_pattern("linkedin.com", "lnkd.in"),
        _normalize_linkedin,
    ),
    SocialPlatform(
        Platform.YOUTUBE,
        _host_pattern("youtube.com", "youtu.be"),
        _handle_normalizer(
            r"(?:youtube\.com|youtu\.be)/(?:channel/|user/|c/)?([^/?#]+)",
            "https://youtube.com/{handle}",
        ),
    ),
    SocialPlatform(
        Platform.TWITTER,
        _host_pattern("twitter.com", "x.com"),
        _handle_normalizer(r"(?:twitter\.com|x\.com)/([^/?#]+)", "https://twitter.com/{handle}"),
    ),
    SocialPlatform(
        Platform.TIKTOK,
        _host_pattern("tiktok.com"),
        _handle_normalizer(r"tiktok\.com/(@[^/?#]+|[^/?#]+)", "https://tiktok.com/{handle}"),
    ),
    SocialPlatform(
        Platform.WHATSAPP,
        _host_pattern("wa.me", "whatsapp.com"),
        _normalize_whatsapp,
    ),
    SocialPlatform(
        Platform.TELEGRAM,
        _host_pattern("t.me", "telegram.me", "telegram.dog"),
        _handle_normalizer(r"(?:t\.me|telegram\.me|telegram\.dog)/([^/?#]+)", "https://t.me/{handle}"),
    ),
)


def match_social_link(url: str) -> tuple[Platform, str] | None:
    """Classify a link and return its platform and normalized profile URL.

    Args:
        url: An absolute link URL or meta tag value

    Returns:
        ``(platform, normalized_url)`` for the first matching platform,
        or None if the link does not belong to any known platform
    """
    for entry in SOCIAL_PLATFORMS:
        if entry.matches(url):
            return entry.platform, entry.normalize(url)
    return None
