# shikhi/utils/rate_limit.py
import time
from typing import Callable, Dict

from fastapi import Request

from shikhi import config
from shikhi.utils.exceptions import RateLimitError
from shikhi.utils.logger import get_logger

logger = get_logger("RateLimit")


class RateLimiter:
    """Fixed-window request counter keyed by caller identifier (per process)."""

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        # identifier -> [count, reset_at]
        self._records: Dict[str, list] = {}

    def check(self, identifier: str) -> bool:
        now = self._clock()
        record = self._records.get(identifier)

        if record is None or now > record[1]:
            self._records[identifier] = [1, now + self.window_seconds]
            return True

        if record[0] >= self.max_requests:
            return False

        record[0] += 1
        return True

    def cleanup(self) -> int:
        now = self._clock()
        stale = [key for key, (_, reset_at) in self._records.items() if now > reset_at]
        for key in stale:
            del self._records[key]
        return len(stale)


default_limiter = RateLimiter(config.RATE_LIMIT_MAX_REQUESTS, config.RATE_LIMIT_WINDOW_SECONDS)


def rate_limited(limiter: RateLimiter = default_limiter):
    """FastAPI dependency factory; keys on the bearer token or client address."""

    async def dependency(request: Request):
        auth_header = request.headers.get("authorization")
        identifier = auth_header or (request.client.host if request.client else "anonymous")
        if not limiter.check(identifier):
            logger.warning(f"Rate limit exceeded on {request.url.path}")
            raise RateLimitError()

    return dependency
