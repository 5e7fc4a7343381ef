"""
Response Cache

In-process TTL cache for normalized provider responses.
"""

from stockchart.services.cache.response_cache import (
    CacheEntry,
    CacheTTL,
    ResponseCache,
    generate_key,
)

__all__ = ["CacheEntry", "CacheTTL", "ResponseCache", "generate_key"]
