"""
Named TTL caches for reference data, built on cachetools.

Each shell state owns one CacheRegistry (no process-wide registry), so a
reset drops every cached entry together with the stores.
"""
from typing import Any

import structlog
from cachetools import TTLCache

logger = structlog.get_logger(__name__)


class CacheRegistry:
    """Registry of named TTL caches with automatic expiration."""

    def __init__(self):
        self._caches: dict[str, TTLCache] = {}

    def get_ttl_cache(self, name: str, maxsize: int = 128, ttl: int = 3600) -> TTLCache:
        """
        Get or create a named TTL cache.

        Args:
            name: Unique identifier for the cache (e.g., 'asset_types')
            maxsize: Maximum number of entries in cache
            ttl: Time-to-live in seconds

        Returns:
            TTLCache instance with specified parameters
        """
        if name not in self._caches:
            logger.debug("Creating new TTL cache", cache_name=name, maxsize=maxsize, ttl_seconds=ttl)
            self._caches[name] = TTLCache(maxsize=maxsize, ttl=ttl)
        return self._caches[name]

    def clear_cache(self, name: str) -> bool:
        """Clear a named cache. Returns False if no such cache exists."""
        if name in self._caches:
            self._caches[name].clear()
            logger.debug("Cache cleared", cache_name=name)
            return True
        return False

    def clear_all(self) -> int:
        """Clear all registered caches and return how many there were."""
        for cache in self._caches.values():
            cache.clear()
        return len(self._caches)

    def get_cache_stats(self, name: str) -> dict[str, Any] | None:
        """Get size/maxsize/ttl for a named cache, or None if not found."""
        cache = self._caches.get(name)
        if cache is None:
            return None
        return {
            "name": name,
            "current_size": len(cache),
            "maxsize": cache.maxsize,
            "ttl": cache.ttl
            }
