"""
In-memory response cache for normalized API results.

Keys:
- candles:{source}:{symbol}:{resolution}:{outputsize}[:{from}:{to}] -> list[Candle]
- quote:{source}:{symbol} -> Quote
- search:{source}:{query} -> list[SymbolSearchResult]
- profile:{source}:{symbol} -> CompanyProfile

Entries expire after their TTL and are removed lazily on read. When the
cache is full the oldest inserted entry is evicted before a new one is stored.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class CacheTTL:
    """TTL presets in seconds, per data class."""

    QUOTE = 60
    INTRADAY = 60
    DAILY = 5 * 60
    HISTORICAL = 15 * 60
    SYMBOL_SEARCH = 30 * 60
    COMPANY_PROFILE = 60 * 60


@dataclass
class CacheEntry:
    data: Any
    stored_at: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return now - self.stored_at < self.ttl


def generate_key(prefix: str, *parts: Any) -> str:
    """Join non-empty parts into a cache key: prefix:part1:part2..."""
    return ":".join([prefix, *(str(p) for p in parts if p is not None and p != "")])


class ResponseCache:
    """
    Keyed TTL cache.

    Single logical owner; the lock only guards against concurrent hosts.
    """

    def __init__(
        self,
        max_entries: int = 100,
        default_ttl: float = CacheTTL.DAILY,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self.default_ttl = default_ttl
        self._clock = clock
        # dict preserves insertion order; overwrites re-insert at the end
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Cached value, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug(f"Cache miss: {key}")
                return None
            if not entry.is_valid(self._clock()):
                del self._entries[key]
                logger.debug(f"Cache expired: {key}")
                return None
            logger.debug(f"Cache hit: {key}")
            return entry.data

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug(f"Cache full, evicted {oldest}")

            self._entries[key] = CacheEntry(
                data=data,
                stored_at=self._clock(),
                ttl=self.default_ttl if ttl is None else ttl,
            )

    def has(self, key: str) -> bool:
        """True if a valid entry exists (expired entries are dropped)."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if not entry.is_valid(self._clock()):
                del self._entries[key]
                return False
            return True

    def invalidate(self, key: str) -> bool:
        """Remove one entry; True if it existed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_prefix(self, prefix: str) -> int:
        """Remove every entry whose key starts with prefix."""
        with self._lock:
            keys = [k for k in self._entries if k.startswith(prefix)]
            for key in keys:
                del self._entries[key]
            return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def clear_expired(self) -> int:
        """Drop all expired entries and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if not e.is_valid(now)]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def size(self) -> int:
        """Stored entries, including expired ones not yet collected."""
        with self._lock:
            return len(self._entries)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        return self.size()
