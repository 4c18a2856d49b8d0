"""Models for extracted contact data."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Platform(str, Enum):
    """Recognized social media platforms, in match priority order."""

    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    LINKEDIN = "linkedin"
    YOUTUBE = "youtube"
    TWITTER = "twitter"
    TIKTOK = "tiktok"
    WHATSAPP = "whatsapp"
    TELEGRAM = "telegram"


@dataclass
class PageExtraction:
    """Contact data found on a single fetched page.

    Emails are kept lowercase and unique in first-seen order. Social links
    are unique per platform under case-insensitive comparison.
    """

    emails: list[str] = field(default_factory=list)
    social_links: dict[Platform, list[str]] = field(default_factory=dict)

    def add_email(self, email: str) -> bool:
        email = email.strip().lower()
        if not email or email in self.emails:
            return False
        self.emails.append(email)
        return True

    def add_social_link(self, platform: Platform, url: str) -> bool:
        links = self.social_links.setdefault(platform, [])
        if any(existing.lower() == url.lower() for existing in links):
            return False
        links.append(url)
        return True

    def social_link_pairs(self) -> list[tuple[Platform, str]]:
        return [(platform, url) for platform, urls in self.social_links.items() for url in urls]

    def is_empty(self) -> bool:
        return not self.emails and not any(self.social_links.values())


class ScrapeResult(BaseModel):
    """Merged contact data for one requested target."""

    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(description="The normalized URL (or the raw input if it could not be normalized)")
    emails: list[str] = Field(default_factory=list, description="Unique lowercase email addresses")
    social_links: dict[str, list[str]] = Field(
        default_factory=dict,
        alias="socialLinks",
        description="Platform name mapped to its unique profile URLs",
    )
    error: str | None = Field(default=None, description="Error message if the main page could not be scraped")

    @property
    def success(self) -> bool:
        return self.error is None

    def to_response(self) -> dict:
        """Serialize to the JSON shape returned by the HTTP endpoint."""
        return self.model_dump(by_alias=True, exclude_none=True)


class BatchProgress(BaseModel):
    """Progress of one batch scraping run."""

    total_targets: int = Field(ge=0, description="Number of targets submitted")
    completed_targets: int = Field(default=0, ge=0, description="Number of targets finished so far")

    @property
    def done(self) -> bool:
        return self.completed_targets >= self.total_targets

    def advance(self, count: int) -> None:
        """Record ``count`` more finished targets, capped at the total."""
        if count < 0:
            raise ValueError("Progress can only move forward")
        self.completed_targets = min(self.total_targets, self.completed_targets + count)


class BatchScrapeResponse(BaseModel):
    """Response model for the scrape_contacts MCP tool."""

    total: int = Field(description="Total number of URLs processed")
    successful: int = Field(description="Number of successful scrapes")
    failed: int = Field(description="Number of failed scrapes")
    results: list[ScrapeResult] = Field(description="Results for each URL, in input order")
