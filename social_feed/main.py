"""
Social Feed API — entry point.

Startup sequence:
  1. Configure OTel tracing (OTLP export when an endpoint is set)
  2. Create the DB engine (in-memory SQLite by default) and tables
  3. Seed the sample dataset (optional)
  4. Create the feed response cache (in-process, or Redis)
  5. Build the scoring policy from settings
  6. Expose Prometheus /metrics endpoint

Run with:  uvicorn social_feed.main:app
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from prometheus_client import make_asgi_app

from social_feed.config import Settings, settings as default_settings
from social_feed.database import (
    create_engine,
    create_session_lock,
    create_sessionmaker,
    init_db,
)
from social_feed.errors import register_error_handlers
from social_feed.feed.cache import FeedCache, MemoryFeedCache
from social_feed.feed.ranking import policy_from_settings
from social_feed.routers import comments, feed, posts, users
from social_feed.seed import seed_sample_data
from social_feed.telemetry import instrument_app, setup_tracing

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


async def _create_feed_cache(settings: Settings) -> FeedCache:
    if settings.feed_cache_backend == "redis":
        from social_feed.clients.redis_client import RedisFeedCache, init_redis

        return RedisFeedCache(await init_redis(settings))
    return MemoryFeedCache()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    # Set up tracing before requests are served so all spans are exported
    setup_tracing(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage startup and shutdown of the store and the feed cache."""
        logger.info("Starting Social Feed API (env=%s)", settings.environment)

        engine = create_engine(settings)
        await init_db(engine)
        sessionmaker = create_sessionmaker(engine)
        if settings.seed_sample_data:
            await seed_sample_data(sessionmaker)

        app.state.settings = settings
        app.state.engine = engine
        app.state.sessionmaker = sessionmaker
        app.state.session_lock = create_session_lock(settings)
        app.state.feed_cache = await _create_feed_cache(settings)
        app.state.scoring_policy = policy_from_settings(settings)

        logger.info(
            "API ready (cache=%s, scoring=%s)",
            settings.feed_cache_backend, app.state.scoring_policy.name,
        )
        yield

        logger.info("Shutting down...")
        await app.state.feed_cache.close()
        await engine.dispose()

    app = FastAPI(
        title="Social Feed API",
        description=(
            "Personalized feed: interest-profile filtering, engagement/recency "
            "ranking, cursor pagination and response caching."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # ── Routers ────────────────────────────────────────────────────────────
    app.include_router(users.router, prefix="/users", tags=["Users"])
    app.include_router(posts.router, prefix="/posts", tags=["Posts"])
    app.include_router(comments.router, prefix="/comments", tags=["Comments"])
    app.include_router(feed.router, prefix="/feed", tags=["Feed"])

    register_error_handlers(app)

    # ── Prometheus metrics endpoint ────────────────────────────────────────
    app.mount("/metrics", make_asgi_app())

    # ── OTel FastAPI instrumentation ──────────────────────────────────────
    instrument_app(app)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok", "service": settings.service_name}

    return app


app = create_app()
