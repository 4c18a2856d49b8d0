"""On-disk cache of fetched pages, backed by diskcache."""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path
from typing import Any

import diskcache

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = "/app/cache"
DEFAULT_SIZE_LIMIT = 500 * 1024 * 1024
DEFAULT_TTL = 3600

PAGE_KEY_PREFIX = "page:"


def resolve_cache_dir(cache_dir: str | Path | None = None) -> Path:
    """Pick the directory for page storage.

    Uses ``cache_dir`` when given, otherwise ``$CACHE_DIR`` or /app/cache.
    Falls back to ``.cache`` in the working directory when the configured
    location cannot be created.
    """
    if cache_dir is not None:
        return Path(cache_dir)

    configured = Path(os.getenv("CACHE_DIR", DEFAULT_CACHE_DIR))
    try:
        configured.mkdir(parents=True, exist_ok=True)
        return configured
    except OSError:
        fallback = Path.cwd() / ".cache"
        fallback.mkdir(parents=True, exist_ok=True)
        logger.info(f"Cannot use {configured} for the page cache, falling back to {fallback}")
        return fallback


class CacheManager:
    """Cache of fetched pages keyed by the requested URL.

    Every entry carries its own TTL. Once the size limit is reached the
    least recently used pages are evicted first. Cache failures are logged
    and treated as misses, so a broken cache never fails a scrape.
    """

    def __init__(
        self,
        cache_dir: str | Path | None = None,
        size_limit: int = DEFAULT_SIZE_LIMIT,
    ) -> None:
        self.cache_dir = resolve_cache_dir(cache_dir)
        self.size_limit = size_limit
        self.cache = diskcache.Cache(
            directory=str(self.cache_dir),
            size_limit=size_limit,
            eviction_policy="least-recently-used",
            statistics=True,
        )
        logger.info(f"Page cache at {self.cache_dir} (limit {size_limit // (1024 * 1024)}MB)")

    @staticmethod
    def generate_cache_key(url: str) -> str:
        """Key for the page fetched from ``url``."""
        return PAGE_KEY_PREFIX + hashlib.sha256(url.encode("utf-8")).hexdigest()

    def get(self, url: str, default: Any = None) -> Any:
        """Return the cached page for ``url``, or ``default`` on a miss."""
        try:
            page = self.cache.get(self.generate_cache_key(url), default=default, retry=True)
        except Exception as e:
            logger.warning(f"Page cache read failed for {url}: {e}")
            return default

        logger.debug(f"Page cache {'miss' if page is default else 'hit'}: {url}")
        return page

    def set(self, url: str, value: Any, expire: int | None = DEFAULT_TTL) -> bool:
        """Store the page fetched from ``url``.

        Args:
            url: The requested URL
            value: The fetched page
            expire: Seconds until the entry expires (None keeps it until evicted)

        Returns:
            True if the page was stored
        """
        try:
            return self.cache.set(self.generate_cache_key(url), value, expire=expire, retry=True)
        except Exception as e:
            logger.warning(f"Page cache write failed for {url}: {e}")
            return False

    def clear(self) -> None:
        """Drop every cached page and reset hit/miss counters."""
        try:
            removed = self.cache.clear(retry=True)
            self.cache.stats(reset=True)
        except Exception as e:
            logger.error(f"Page cache clear failed: {e}")
            return
        logger.info(f"Page cache cleared ({removed} entries)")

    def expire(self) -> int:
        """Remove expired pages and return how many were removed."""
        try:
            removed = self.cache.expire(retry=True)
        except Exception as e:
            logger.error(f"Page cache expiry failed: {e}")
            return 0
        logger.info(f"Expired {removed} cached pages")
        return removed

    def get_stats(self) -> dict[str, int | float | str]:
        try:
            hits, misses = self.cache.stats()
            volume = self.cache.volume()
            entries = len(self.cache)
        except Exception as e:
            logger.error(f"Page cache stats unavailable: {e}")
            return {"error": str(e)}

        lookups = hits + misses
        return {
            "entry_count": entries,
            "size_bytes": volume,
            "size_mb": round(volume / (1024 * 1024), 2),
            "size_limit_mb": round(self.size_limit / (1024 * 1024), 2),
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / lookups, 4) if lookups else 0.0,
            "cache_dir": str(self.cache_dir),
        }

    def close(self) -> None:
        self.cache.close()

    def __enter__(self) -> CacheManager:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


_cache_manager: CacheManager | None = None


def get_cache_manager() -> CacheManager:
    """Return the process-wide page cache, opening it on first use."""
    global _cache_manager

    if _cache_manager is None:
        _cache_manager = CacheManager()

    return _cache_manager
