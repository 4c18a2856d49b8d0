"""In-process counters for scraped targets and the running batch."""

from __future__ import annotations

from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from contact_scraper.models import BatchProgress

RECENT_TARGETS_KEPT = 50
RECENT_ERRORS_KEPT = 20
RECENT_SHOWN = 10


@dataclass
class TargetMetrics:
    """Outcome of scraping one target."""

    url: str
    success: bool
    timestamp: datetime = field(default_factory=datetime.now)
    emails_found: int = 0
    social_links_found: int = 0
    elapsed_ms: float | None = None
    attempts: int = 1
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


@dataclass
class ServerMetrics:
    """Scraper-wide counters since process start."""

    start_time: datetime = field(default_factory=datetime.now)
    total_targets: int = 0
    successful_targets: int = 0
    failed_targets: int = 0
    total_retries: int = 0
    runs_started: int = 0
    current_progress: BatchProgress | None = None
    recent_targets: deque[TargetMetrics] = field(default_factory=lambda: deque(maxlen=RECENT_TARGETS_KEPT))
    recent_errors: deque[TargetMetrics] = field(default_factory=lambda: deque(maxlen=RECENT_ERRORS_KEPT))

    def record_target(
        self,
        url: str,
        success: bool,
        emails_found: int = 0,
        social_links_found: int = 0,
        elapsed_ms: float | None = None,
        attempts: int = 1,
        error: str | None = None,
    ) -> None:
        """Count one finished target.

        Args:
            url: The target URL
            success: Whether the target's main page was scraped
            emails_found: Unique emails in the merged result
            social_links_found: Unique social links in the merged result
            elapsed_ms: Wall time spent on the target
            attempts: HTTP attempts made for the main page
            error: Error recorded for the target, if any
        """
        entry = TargetMetrics(
            url=url,
            success=success,
            emails_found=emails_found,
            social_links_found=social_links_found,
            elapsed_ms=elapsed_ms,
            attempts=attempts,
            error=error,
        )

        self.total_targets += 1
        self.total_retries += max(0, attempts - 1)
        self.recent_targets.append(entry)

        if success:
            self.successful_targets += 1
        else:
            self.failed_targets += 1
            self.recent_errors.append(entry)

    def start_run(self, progress: BatchProgress) -> None:
        """Track ``progress`` as the current batch run."""
        self.runs_started += 1
        self.current_progress = progress

    @property
    def uptime_seconds(self) -> float:
        return (datetime.now() - self.start_time).total_seconds()

    @property
    def success_rate(self) -> float:
        """Percentage of targets whose main page was scraped."""
        if not self.total_targets:
            return 0.0
        return 100 * self.successful_targets / self.total_targets

    def to_dict(self) -> dict[str, Any]:
        """Snapshot for the stats endpoint, newest targets first."""
        uptime = self.uptime_seconds
        average_retries = self.total_retries / self.total_targets if self.total_targets else 0.0

        return {
            "status": "healthy",
            "uptime": {"seconds": uptime, "formatted": self._format_uptime(uptime)},
            "start_time": self.start_time.isoformat(),
            "targets": {
                "total": self.total_targets,
                "successful": self.successful_targets,
                "failed": self.failed_targets,
                "success_rate": round(self.success_rate, 2),
            },
            "retries": {
                "total": self.total_retries,
                "average_per_target": round(average_retries, 2),
            },
            "runs": {
                "started": self.runs_started,
                "current": self.current_progress.model_dump() if self.current_progress else None,
            },
            "recent_targets": [t.to_dict() for t in reversed(list(self.recent_targets)[-RECENT_SHOWN:])],
            "recent_errors": [
                {"url": t.url, "timestamp": t.timestamp.isoformat(), "attempts": t.attempts, "error": t.error}
                for t in reversed(list(self.recent_errors)[-RECENT_SHOWN:])
            ],
        }

    @staticmethod
    def _format_uptime(seconds: float) -> str:
        seconds = int(seconds)
        days, rest = divmod(seconds, 86400)
        hours, rest = divmod(rest, 3600)
        minutes, secs = divmod(rest, 60)

        if days:
            return f"{days}d {hours}h"
        if hours:
            return f"{hours}h {minutes}m"
        if minutes:
            return f"{minutes}m {secs}s"
        return f"{secs}s"


_metrics = ServerMetrics()


def get_metrics() -> ServerMetrics:
    return _metrics


def record_target(url: str, success: bool, **details: Any) -> None:
    """Count one finished target in the process-wide metrics."""
    _metrics.record_target(url, success, **details)
