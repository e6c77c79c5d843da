import asyncio

from shikhi.utils.cache import TTLCache
from shikhi.utils.rate_limit import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_cache_expires_entries():
    clock = FakeClock()
    cache = TTLCache(default_ttl=10, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2, ttl=100)

    clock.now = 11
    assert cache.get("a") is None
    assert cache.get("b") == 2


def test_cache_cleanup_and_stats():
    clock = FakeClock()
    cache = TTLCache(default_ttl=5, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3, ttl=60)

    clock.now = 6
    assert cache.stats() == {"total": 3, "active": 1, "expired": 2}
    assert cache.cleanup() == 2
    assert cache.stats() == {"total": 1, "active": 1, "expired": 0}


async def test_get_or_set_calls_factory_once():
    cache = TTLCache(default_ttl=60)
    calls = []

    async def factory():
        calls.append(1)
        await asyncio.sleep(0)
        return {"title": "cached"}

    assert await cache.get_or_set("k", factory) == {"title": "cached"}
    assert await cache.get_or_set("k", factory) == {"title": "cached"}
    assert len(calls) == 1


async def test_get_or_set_does_not_cache_none():
    cache = TTLCache(default_ttl=60)

    async def missing():
        return None

    assert await cache.get_or_set("k", missing) is None
    assert cache.stats()["total"] == 0


def test_rate_limiter_fixed_window():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock)

    assert limiter.check("u1") is True
    assert limiter.check("u1") is True
    assert limiter.check("u1") is False
    assert limiter.check("u2") is True

    clock.now = 61
    assert limiter.check("u1") is True


def test_rate_limiter_cleanup_drops_stale_windows():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=5, window_seconds=10, clock=clock)
    limiter.check("a")
    clock.now = 5
    limiter.check("b")

    clock.now = 12
    assert limiter.cleanup() == 1
    assert limiter.check("b") is True
