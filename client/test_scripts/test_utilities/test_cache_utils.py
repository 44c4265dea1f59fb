"""
Tests for the named TTL cache registry.
"""
import time

from client.app.utils.cache_utils import CacheRegistry


def test_get_ttl_cache_returns_same_instance():
    caches = CacheRegistry()
    first = caches.get_ttl_cache("asset_types", maxsize=1, ttl=60)
    second = caches.get_ttl_cache("asset_types", maxsize=99, ttl=1)

    assert first is second
    assert first.maxsize == 1


def test_clear_cache_and_stats():
    caches = CacheRegistry()
    cache = caches.get_ttl_cache("asset_types", maxsize=4, ttl=60)
    cache["asset_types"] = ("stock",)

    stats = caches.get_cache_stats("asset_types")
    assert stats["current_size"] == 1
    assert stats["maxsize"] == 4

    assert caches.clear_cache("asset_types") is True
    assert len(cache) == 0
    assert caches.clear_cache("missing") is False
    assert caches.get_cache_stats("missing") is None


def test_clear_all():
    caches = CacheRegistry()
    caches.get_ttl_cache("a")["k"] = 1
    caches.get_ttl_cache("b")["k"] = 2

    assert caches.clear_all() == 2
    assert len(caches.get_ttl_cache("a")) == 0
    assert len(caches.get_ttl_cache("b")) == 0


def test_entries_expire():
    caches = CacheRegistry()
    cache = caches.get_ttl_cache("short", ttl=0.05)
    cache["k"] = 1
    time.sleep(0.1)
    assert cache.get("k") is None


def test_registries_are_independent():
    first, second = CacheRegistry(), CacheRegistry()
    first.get_ttl_cache("asset_types")["asset_types"] = 1
    assert second.get_ttl_cache("asset_types").get("asset_types") is None
