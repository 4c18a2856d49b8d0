"""MCP contact scraping tools and business logic.

The tools module follows a router -> service pattern:
- router.py: MCP tool definitions and registration
- service.py: Per-target scraping, page merging and batch orchestration

Batch runs process targets in fixed-size batches: targets inside a batch
are scraped concurrently, batches run one after another, and a failing
target only ever produces an error entry for itself.
"""

from contact_scraper.tools.router import (
    register_cache_tools,
    register_scraping_tools,
    scrape_contacts,
)
from contact_scraper.tools.service import (
    BatchUpdate,
    batch_scrape_contacts,
    iter_scrape_batches,
    merge_extractions,
    partition,
    scrape_batch,
    scrape_contact_page,
    scrape_target,
)

__all__ = [
    # MCP tool functions
    "scrape_contacts",
    # Registration functions
    "register_scraping_tools",
    "register_cache_tools",
    # Service functions
    "BatchUpdate",
    "batch_scrape_contacts",
    "iter_scrape_batches",
    "merge_extractions",
    "partition",
    "scrape_batch",
    "scrape_contact_page",
    "scrape_target",
]
