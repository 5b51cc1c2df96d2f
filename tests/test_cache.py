from fieldreports.core.cache import TTLCache


def test_entries_expire_after_ttl(clock):
    cache = TTLCache(ttl_seconds=60, clock=clock)
    cache.set("all", ["A"])
    assert cache.get("all") == ["A"]

    clock.advance(59)
    assert cache.is_valid("all")

    clock.advance(1)
    assert cache.get("all") is None
    assert not cache.is_valid("all")


def test_expired_entries_are_still_served_stale(clock):
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set("k", 1)
    clock.advance(100)
    assert cache.get("k") is None
    assert cache.get_stale("k") == 1
    assert "k" in cache


def test_no_ttl_means_valid_until_invalidated(clock):
    cache = TTLCache(clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    clock.advance(10**9)
    assert cache.get("a") == 1

    cache.invalidate("a")
    assert cache.get_stale("a") is None
    assert len(cache) == 1

    cache.invalidate()
    assert len(cache) == 0
