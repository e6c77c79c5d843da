# shikhi/utils/cache.py
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from shikhi import config
from shikhi.utils.logger import get_logger

logger = get_logger("Cache")


class TTLCache:
    """
    Per-process key/value cache with a time-to-live per entry.

    Not shared between server instances; every worker keeps its own copy.
    """

    def __init__(self, default_ttl: float = 300, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        self._entries[key] = (value, self._clock() + (ttl or self.default_ttl))

    def get(self, key: str) -> Any:
        item = self._entries.get(key)
        if item is None:
            return None
        value, expiry = item
        if self._clock() > expiry:
            del self._entries[key]
            return None
        return value

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_set(self, key: str, factory: Callable[[], Awaitable[Any]], ttl: Optional[float] = None) -> Any:
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        logger.debug(f"Cache miss: {key}")
        value = await factory()
        if value is not None:
            self.set(key, value, ttl)
        return value

    def cleanup(self) -> int:
        now = self._clock()
        expired = [key for key, (_, expiry) in self._entries.items() if now > expiry]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Cache cleanup: removed {len(expired)} expired entries")
        return len(expired)

    def stats(self) -> dict:
        now = self._clock()
        expired = sum(1 for _, expiry in self._entries.values() if now > expiry)
        return {"total": len(self._entries), "active": len(self._entries) - expired, "expired": expired}


course_cache = TTLCache(config.COURSE_CACHE_TTL_SECONDS)
