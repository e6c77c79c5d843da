import asyncio
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from shikhi import config
from shikhi.db.database import ensure_indexes
from shikhi.routers import admin_courses, assignments, calls, certificates, courses, messages, quiz_results, uploads, users
from shikhi.utils.cache import course_cache
from shikhi.utils.exceptions import register_exception_handlers
from shikhi.utils.logger import get_logger, setup_logging
from shikhi.utils.rate_limit import default_limiter

logger = get_logger("App")


async def sweep_expired(interval: float = config.CACHE_SWEEP_INTERVAL_SECONDS):
    """Evict expired cache entries and stale rate-limit windows until cancelled."""
    while True:
        await asyncio.sleep(interval)
        evicted = course_cache.cleanup()
        stale = default_limiter.cleanup()
        if evicted or stale:
            logger.debug(f"Sweep removed {evicted} cache entries and {stale} rate-limit records")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(f"Starting {config.APP_NAME} ({config.ENVIRONMENT})")
    try:
        await ensure_indexes()
    except Exception as e:
        # The API can still serve reads without fresh indexes
        logger.error(f"Index creation failed: {e}")

    sweeper = asyncio.create_task(sweep_expired())
    try:
        yield
    finally:
        sweeper.cancel()
        logger.info("Shutting down")


app = FastAPI(
    title=config.APP_NAME,
    description="Japanese Shikhi E-Learning Platform API",
    version=config.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration = (time.perf_counter() - start) * 1000
    user_id = getattr(request.state, "user_id", None)
    user_part = f" [User: {user_id}]" if user_id else ""
    get_logger("API").info(f"{request.method} {request.url.path}{user_part} ({duration:.0f}ms) -> {response.status_code}")
    return response


register_exception_handlers(app)


@app.get("/")
def root():
    return {
        "message": config.APP_NAME,
        "version": config.APP_VERSION,
        "status": "operational",
    }


# Include routers
app.include_router(users.router, prefix="/api")
app.include_router(courses.router, prefix="/api")
app.include_router(admin_courses.router, prefix="/api")
app.include_router(assignments.router, prefix="/api")
app.include_router(quiz_results.router, prefix="/api")
app.include_router(messages.router, prefix="/api")
app.include_router(uploads.router, prefix="/api")
app.include_router(calls.router, prefix="/api")
app.include_router(certificates.router, prefix="/api")
