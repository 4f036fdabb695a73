"""
Unit tests for the TTL cache.
"""

import asyncio

import pytest

from service_proxy.app.caching.ttl_cache import CacheEntry, TTLCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class TestTTLCache:
    """Test cases for TTLCache."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return TTLCache(ttl=60, checkperiod=10, clock=clock)

    def test_get_missing_key(self, cache):
        """Test getting a missing key."""
        assert cache.get("profile:missing") is None
        assert cache.has("profile:missing") is False
        assert cache.stats()["misses"] == 1

    def test_set_and_get_found_entry(self, cache):
        """Test storing and reading a found entry."""
        cache.set("username_to_uuid:notch", CacheEntry.of({"uuid": "069a79f4-44e9-4726-a5be-fca90e38aaf5"}))

        entry = cache.get("username_to_uuid:notch")
        assert entry.found is True
        assert entry.value == {"uuid": "069a79f4-44e9-4726-a5be-fca90e38aaf5"}
        assert cache.has("username_to_uuid:notch")

    def test_negative_entry_is_stored(self, cache):
        """Test storing a not-found entry."""
        cache.set("username_to_uuid:nobody", CacheEntry.not_found())

        entry = cache.get("username_to_uuid:nobody")
        assert entry is not None
        assert entry.found is False
        assert entry.value is None

    def test_entry_alive_at_exact_ttl(self, cache, clock):
        """Test an entry is still live at exactly ttl seconds."""
        cache.set("k", CacheEntry.of(1))
        clock.advance(60)

        assert cache.get("k") == CacheEntry.of(1)

    def test_entry_expires_after_ttl(self, cache, clock):
        """Test an entry expires strictly after ttl seconds."""
        cache.set("k", CacheEntry.not_found())
        clock.advance(60.001)

        assert cache.get("k") is None
        assert cache.has("k") is False
        assert len(cache) == 0

    def test_reads_do_not_extend_ttl(self, cache, clock):
        """Test reads do not extend expiry."""
        cache.set("k", CacheEntry.of(1))
        clock.advance(50)
        assert cache.get("k") is not None
        clock.advance(11)

        assert cache.get("k") is None

    def test_overwrite_restarts_ttl(self, cache, clock):
        """Test overwriting restarts expiry."""
        cache.set("k", CacheEntry.of(1))
        clock.advance(50)
        cache.set("k", CacheEntry.of(2))
        clock.advance(50)

        assert cache.get("k") == CacheEntry.of(2)

    def test_namespaced_keys_do_not_collide(self, cache):
        """Test namespaced keys are independent."""
        cache.set("username_to_uuid:abc", CacheEntry.of("name"))
        cache.set("profile:abc", CacheEntry.not_found())

        assert cache.get("username_to_uuid:abc").found is True
        assert cache.get("profile:abc").found is False

    def test_zero_ttl_never_expires(self, clock):
        """Test a zero ttl never expires."""
        cache = TTLCache(ttl=0, checkperiod=0, clock=clock)
        cache.set("k", CacheEntry.of(1))
        clock.advance(10 ** 9)

        assert cache.get("k") == CacheEntry.of(1)
        assert cache.sweep() == 0

    def test_sweep_evicts_only_expired(self, cache, clock):
        """Test the sweep evicts only expired entries."""
        cache.set("old", CacheEntry.of(1))
        clock.advance(30)
        cache.set("new", CacheEntry.of(2))
        clock.advance(31)

        assert cache.sweep() == 1
        assert cache.keys() == ["new"]
        assert len(cache) == 1

    def test_sweep_keeps_entries_at_exact_ttl(self, cache, clock):
        """Test the sweep honours the same boundary as reads."""
        cache.set("k", CacheEntry.of(1))
        clock.advance(60)

        assert cache.sweep() == 0
        assert cache.has("k")

        clock.advance(0.001)
        assert cache.sweep() == 1
        assert cache.delete("k") is False

    def test_delete_and_flush(self, cache):
        """Test delete and flush."""
        cache.set("a", CacheEntry.of(1))
        cache.set("b", CacheEntry.of(2))

        assert cache.delete("a") is True
        assert cache.delete("a") is False

        cache.flush()
        assert len(cache) == 0
        assert cache.stats()["hits"] == 0

    def test_set_requires_cache_entry(self, cache):
        """Test only CacheEntry values are accepted."""
        with pytest.raises(TypeError):
            cache.set("k", {"uuid": "x"})

    def test_negative_settings_rejected(self):
        """Test negative settings are rejected."""
        with pytest.raises(ValueError):
            TTLCache(ttl=-1, checkperiod=10)

    def test_on_change_reports_size(self, clock):
        """Test the change callback receives the size."""
        sizes = []
        cache = TTLCache(ttl=10, checkperiod=10, clock=clock, on_change=sizes.append)

        cache.set("a", CacheEntry.of(1))
        cache.set("b", CacheEntry.of(2))
        clock.advance(11)
        cache.sweep()

        assert sizes == [1, 2, 0]

    def test_stats(self, cache):
        """Test cache statistics."""
        cache.set("a", CacheEntry.of(1))
        cache.get("a")
        cache.get("b")

        assert cache.stats() == {
            "entries": 1,
            "hits": 1,
            "misses": 1,
            "ttl": 60,
            "checkperiod": 10,
        }

    @pytest.mark.asyncio
    async def test_background_sweep_runs(self):
        """Test the background sweep runs."""
        cache = TTLCache(ttl=1, checkperiod=1)
        swept = asyncio.Event()

        def _sweep():
            swept.set()
            return 0

        cache.sweep = _sweep
        await cache.start()
        try:
            await asyncio.wait_for(swept.wait(), timeout=3)
        finally:
            await cache.stop()

        assert cache.running is False

    @pytest.mark.asyncio
    async def test_start_without_checkperiod_is_noop(self):
        """Test start is a no-op without a checkperiod."""
        cache = TTLCache(ttl=5, checkperiod=0)
        await cache.start()

        assert cache.running is False
        await cache.stop()
