# ==============================================================================
# Caching Utilities
# ==============================================================================
"""
Time-based caching for backend API responses.

The controller keeps the current configuration for a few minutes and the
predefined options for a day, so reruns of the Streamlit script don't hit
the backend every time.
"""

import time
import logging
from collections import OrderedDict
from threading import Lock
from typing import Any, Callable, Dict, Optional

from frontend.config.settings import config

logger = logging.getLogger(__name__)

# Sentinel for distinguishing cached None from cache miss
CACHE_MISS = object()


# ==============================================================================
# TTL Cache Implementation
# ==============================================================================

class TTLCache:
    """
    Cache with time-to-live (TTL) expiration and LRU eviction.

    Attributes:
        maxsize: Maximum number of items in cache
        ttl: Time-to-live in seconds for each item

    Example:
        cache = TTLCache(maxsize=100, ttl=300)
        cache.set("dice-config", payload)
        value = cache.get("dice-config")
    """

    def __init__(self, maxsize: int = 100, ttl: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.maxsize = maxsize
        self.ttl = ttl
        self._clock = clock
        self._entries: "OrderedDict[str, tuple]" = OrderedDict()  # key -> (stored_at, value)
        self._lock = Lock()
        self._hits = 0
        self._misses = 0

    def _expired(self, stored_at: float) -> bool:
        return self._clock() - stored_at > self.ttl

    def get(self, key: str, default: Any = CACHE_MISS) -> Any:
        """
        Get a value from cache.

        Returns:
            Cached value (including None), or default when missing/expired
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not self._expired(entry[0]):
                self._entries.move_to_end(key)
                self._hits += 1
                return entry[1]
            if entry is not None:
                del self._entries[key]
            self._misses += 1
            return default

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.maxsize:
                self._entries.popitem(last=False)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def get_or_load(self, key: str, loader: Callable[[], Any], cache_if: Optional[Callable[[Any], bool]] = None) -> Any:
        """Return the cached value or call loader and cache its result.

        Args:
            key: Cache key
            loader: Produces the value on a miss
            cache_if: Optional predicate; results failing it are returned
                but not cached (e.g. failed API responses)
        """
        value = self.get(key)
        if value is not CACHE_MISS:
            logger.debug(f"Cache hit for {key}")
            return value

        value = loader()
        if cache_if is None or cache_if(value):
            self.set(key, value)
        return value

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "maxsize": self.maxsize,
                "ttl": self.ttl,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / total if total > 0 else 0.0,
            }

    def __contains__(self, key: str) -> bool:
        """Check if key exists and is not expired (no side effects)."""
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not self._expired(entry[0])

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for stored_at, _ in self._entries.values() if not self._expired(stored_at))


# ==============================================================================
# Pre-configured Caches
# ==============================================================================

# Current configuration from the backend (5 minute TTL)
config_cache = TTLCache(maxsize=100, ttl=config.CONFIG_CACHE_TTL_SECONDS)

# Predefined dice options (24 hour TTL, they never change at runtime)
options_cache = TTLCache(maxsize=10, ttl=config.OPTIONS_CACHE_TTL_SECONDS)


def get_all_cache_stats() -> Dict[str, Dict[str, Any]]:
    return {
        "config_cache": config_cache.stats(),
        "options_cache": options_cache.stats(),
    }


def clear_all_caches() -> None:
    """Clear all pre-configured caches."""
    config_cache.clear()
    options_cache.clear()
    logger.info("All caches cleared")


__all__ = [
    "CACHE_MISS",
    "TTLCache",
    "config_cache",
    "options_cache",
    "get_all_cache_stats",
    "clear_all_caches",
]
