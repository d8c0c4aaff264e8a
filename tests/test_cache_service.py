"""Tests for CacheService"""
import pytest

from git_branch_manager.services.cache_service import CacheService


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return CacheService(clock=clock)


class TestCacheGetSet:
    """Test reads and writes."""

    def test_get_missing_key(self, cache):
        """A key that was never set is a miss."""
        assert cache.get("nothing") is None
        assert cache.has("nothing") is False

    def test_set_then_get(self, cache):
        cache.set("branches_local", ["main"], ttl=60)
        assert cache.get("branches_local") == ["main"]
        assert cache.has("branches_local") is True

    def test_overwrite_resets_value_and_expiry(self, cache, clock):
        cache.set("key", "old", ttl=10)
        clock.advance(8)
        cache.set("key", "new", ttl=10)
        clock.advance(8)
        assert cache.get("key") == "new"

    def test_zero_ttl_stores_nothing(self, cache):
        """A ttl of 0 means do not cache."""
        cache.set("key", "value", ttl=0)
        assert cache.has("key") is False
        assert len(cache) == 0


class TestCacheExpiry:
    """Test time-based expiry."""

    def test_entry_live_before_ttl(self, cache, clock):
        cache.set("key", "value", ttl=60)
        clock.advance(59.9)
        assert cache.get("key") == "value"

    def test_entry_absent_at_ttl(self, cache, clock):
        """Entries are absent as soon as the ttl elapses, without waiting for a sweep."""
        cache.set("key", "value", ttl=60)
        clock.advance(60)
        assert cache.get("key") is None
        assert cache.has("key") is False

    def test_purge_expired(self, cache, clock):
        cache.set("short", 1, ttl=10)
        cache.set("long", 2, ttl=120)
        clock.advance(30)

        assert cache.purge_expired() == 1
        assert cache.keys() == ["long"]

    def test_keys_excludes_expired(self, cache, clock):
        cache.set("a", 1, ttl=5)
        cache.set("b", 2, ttl=50)
        clock.advance(10)
        assert cache.keys() == ["b"]
        assert len(cache) == 1


class TestCacheInvalidation:
    """Test pattern invalidation."""

    def test_invalidate_by_substring(self, cache):
        cache.set("branches_local", 1, ttl=60)
        cache.set("branches_current", 2, ttl=60)
        cache.set("remote_refs", 3, ttl=120)

        removed = cache.invalidate("branches")

        assert removed == 2
        assert cache.keys() == ["remote_refs"]

    def test_invalidate_matches_anywhere_in_key(self, cache):
        cache.set("remote_refs", 1, ttl=60)
        cache.set("remote_advertised", 2, ttl=60)
        assert cache.invalidate("refs") == 1
        assert cache.has("remote_advertised") is True

    def test_invalidate_no_match(self, cache):
        cache.set("status_porcelain", "", ttl=10)
        assert cache.invalidate("branches") == 0
        assert cache.has("status_porcelain") is True

    def test_invalidate_everything(self, cache):
        cache.set("a", 1, ttl=60)
        cache.set("b", 2, ttl=60)
        assert cache.invalidate() == 2
        assert len(cache) == 0
