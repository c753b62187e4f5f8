# tests/adapters/test_memory_cache.py
import pytest

from reinvent.adapters.cache.memory_cache import ResultCache, TTLCacheNamespace
from reinvent.core.domain.models import CacheNamespace


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


class TestTTLCacheNamespace:

    def test_value_expires_after_ttl(self, clock):
        ns = TTLCacheNamespace("simulate", ttl=1800, clock=clock)
        ns.set("k", {"pathways": []})

        clock.now = 1799.9
        assert ns.get("k") == {"pathways": []}

        clock.now = 1800
        assert ns.get("k") is None
        assert ns.stats()["count"] == 0

    def test_per_entry_ttl_override(self, clock):
        ns = TTLCacheNamespace("image", ttl=100, clock=clock)
        ns.set("short", "a", ttl=5)
        ns.set("long", "b")

        clock.now = 10
        assert ns.purge_expired() == 1
        assert ns.get("long") == "b"

    def test_hit_and_miss_counters(self, clock):
        ns = TTLCacheNamespace("audio", ttl=600, clock=clock)
        ns.get("missing")
        ns.set("k", "text")
        ns.get("k")
        ns.get("k")

        assert ns.stats() == {"count": 1, "hits": 2, "misses": 1, "ttl_seconds": 600.0}

    def test_set_replaces_whole_value(self, clock):
        ns = TTLCacheNamespace("deconstruct", ttl=60, clock=clock)
        ns.set("k", "first")
        ns.set("k", "second")
        assert ns.get("k") == "second"

    def test_clear_resets_counters(self, clock):
        ns = TTLCacheNamespace("deconstruct", ttl=60, clock=clock)
        ns.set("k", 1)
        ns.get("k")
        ns.clear()

        assert ns.stats() == {"count": 0, "hits": 0, "misses": 0, "ttl_seconds": 60.0}

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_ttl_must_be_positive(self, ttl):
        with pytest.raises(ValueError):
            TTLCacheNamespace("bad", ttl=ttl)


class TestResultCache:

    def test_namespaces_are_isolated(self, clock):
        cache = ResultCache({"decomposition": 3600, "simulation": 1800}, clock=clock)
        cache.namespace("decomposition").set("radio", "A")

        assert cache.namespace("simulation").get("radio") is None
        assert cache.namespace(CacheNamespace.DECOMPOSITION).get("radio") == "A"

    def test_unknown_namespace(self):
        with pytest.raises(KeyError):
            ResultCache({"decomposition": 60}).namespace("nope")

    def test_stats_and_clear(self, clock):
        cache = ResultCache({"decomposition": 3600, "image": 7200}, clock=clock)
        cache.namespace("image").set("k", "v")

        assert cache.stats()["image"]["count"] == 1
        assert cache.stats()["decomposition"]["count"] == 0

        cache.clear()
        assert cache.stats()["image"]["count"] == 0
