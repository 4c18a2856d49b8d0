"""Admin API functionality for configuration and monitoring.

This module provides administrative endpoints for:
- Health checks and scraper status
- Runtime configuration management
- Page cache management
- Statistics and progress of the current batch run

The admin module follows a router -> service pattern:
- router.py: HTTP endpoint handlers
- service.py: Business logic for config, stats, and cache operations
"""

from contact_scraper.admin.service import (
    DEFAULT_BATCH_DELAY,
    DEFAULT_BATCH_SIZE,
    clear_cache,
    get_config,
    get_current_config,
    get_stats,
    update_config,
)
from contact_scraper.admin.router import (
    api_cache_clear,
    api_config_get,
    api_config_update,
    api_stats,
    health_check,
)

__all__ = [
    # Router functions
    "api_cache_clear",
    "api_config_get",
    "api_config_update",
    "api_stats",
    "health_check",
    # Service functions
    "clear_cache",
    "get_config",
    "get_current_config",
    "get_stats",
    "update_config",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_BATCH_DELAY",
]
