"""Admin service layer for configuration and stats management."""

from __future__ import annotations

import logging
import os
from typing import Any

from contact_scraper.cache_manager import get_cache_manager
from contact_scraper.metrics import get_metrics

logger = logging.getLogger(__name__)

# Default batch settings
DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_DELAY = 1.0
MAX_BATCH_SIZE = 50

_DEFAULTS: dict[str, Any] = {
    "batch_size": DEFAULT_BATCH_SIZE,
    "batch_delay": DEFAULT_BATCH_DELAY,
    "max_attempts": 3,
    "attempt_timeout": 10,
    "final_attempt_timeout": 20,
    "backoff_seconds": 1.0,
    "max_redirects": 5,
    "verify_ssl": True,
    "cache_enabled": False,
    "cache_ttl": 3600,
}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


def _load_runtime_config() -> dict[str, Any]:
    config = dict(_DEFAULTS)
    config["cache_enabled"] = _env_flag("CONTACT_SCRAPER_CACHE", config["cache_enabled"])

    batch_size = os.getenv("CONTACT_SCRAPER_BATCH_SIZE")
    if batch_size:
        try:
            config["batch_size"] = max(1, min(MAX_BATCH_SIZE, int(batch_size)))
        except ValueError:
            logger.warning(f"Ignoring invalid CONTACT_SCRAPER_BATCH_SIZE={batch_size!r}")

    batch_delay = os.getenv("CONTACT_SCRAPER_BATCH_DELAY")
    if batch_delay:
        try:
            config["batch_delay"] = max(0.0, float(batch_delay))
        except ValueError:
            logger.warning(f"Ignoring invalid CONTACT_SCRAPER_BATCH_DELAY={batch_delay!r}")

    return config


# Runtime configuration overrides (not persisted)
_runtime_config: dict[str, Any] = _load_runtime_config()


def get_config(key: str, default: Any = None) -> Any:
    """Get a configuration value with runtime override support.

    Args:
        key: Configuration key
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    return _runtime_config.get(key, default)


def get_stats() -> dict[str, Any]:
    """Get server statistics and metrics.

    Returns:
        Dictionary with server stats including cache and scrape metrics
    """
    stats = get_metrics().to_dict()

    if get_config("cache_enabled"):
        try:
            stats["cache"] = get_cache_manager().get_stats()
        except Exception as e:
            logger.error(f"Cache stats unavailable: {e}")
            stats["cache"] = {"error": "Cache stats unavailable"}

    return stats


def get_current_config() -> dict[str, Any]:
    """Get current runtime configuration.

    Returns:
        Dictionary with current config, defaults, and note
    """
    return {
        "config": _runtime_config,
        "defaults": dict(_DEFAULTS),
        "note": "Changes are not persisted and will reset on server restart",
    }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def update_config(config_updates: dict[str, Any]) -> dict[str, Any]:
    """Update runtime configuration.

    Unknown keys and values failing validation are ignored.

    Args:
        config_updates: Dictionary of config key-value pairs to update

    Returns:
        Dictionary with status, message, updated keys, and current config
    """
    updated = []
    for key, value in config_updates.items():
        if key not in _DEFAULTS:
            continue

        if key == "batch_size" and _is_int(value) and 1 <= value <= MAX_BATCH_SIZE:
            _runtime_config[key] = value
            updated.append(key)
        elif key == "max_attempts" and _is_int(value) and value >= 1:
            _runtime_config[key] = value
            updated.append(key)
        elif key in ("max_redirects", "cache_ttl") and _is_int(value) and value >= 0:
            _runtime_config[key] = value
            updated.append(key)
        elif key in ("attempt_timeout", "final_attempt_timeout") and _is_number(value) and value > 0:
            _runtime_config[key] = value
            updated.append(key)
        elif key in ("batch_delay", "backoff_seconds") and _is_number(value) and value >= 0:
            _runtime_config[key] = value
            updated.append(key)
        elif key in ("verify_ssl", "cache_enabled") and isinstance(value, bool):
            _runtime_config[key] = value
            updated.append(key)

    if updated:
        logger.info(f"Runtime config updated: {', '.join(updated)}")

    return {
        "status": "success",
        "message": f"Updated {len(updated)} config value(s)",
        "updated": updated,
        "current_config": _runtime_config,
    }


def clear_cache() -> dict[str, str]:
    """Clear all cache entries.

    Returns:
        Dictionary with status and message
    """
    get_cache_manager().clear()
    return {
        "status": "success",
        "message": "Cache cleared successfully",
    }
