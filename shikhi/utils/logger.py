# shikhi/utils/logger.py
import logging
import time
from contextlib import asynccontextmanager

from shikhi import config

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(level: str = None):
    logging.basicConfig(level=level or config.LOG_LEVEL, format=LOG_FORMAT)


class ContextAdapter(logging.LoggerAdapter):
    """Prefixes every record with ``[context]``."""

    def process(self, msg, kwargs):
        return f"[{self.extra['context']}] {msg}", kwargs


def get_logger(context: str) -> ContextAdapter:
    return ContextAdapter(logging.getLogger("shikhi"), {"context": context})


perf_logger = get_logger("Performance")


def log_performance(operation: str, duration_ms: float, threshold_ms: float = 1000) -> None:
    if duration_ms > threshold_ms:
        perf_logger.warning(f"Slow operation: {operation} took {duration_ms:.0f}ms")
    else:
        perf_logger.debug(f"{operation} completed in {duration_ms:.0f}ms")


@asynccontextmanager
async def timed(operation: str, threshold_ms: float = 1000):
    start = time.perf_counter()
    try:
        yield
    except Exception:
        duration = (time.perf_counter() - start) * 1000
        perf_logger.error(f"{operation} failed after {duration:.0f}ms")
        raise
    log_performance(operation, (time.perf_counter() - start) * 1000, threshold_ms)
