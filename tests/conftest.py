from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from social_feed.config import Settings
from social_feed.database import create_engine, create_sessionmaker, init_db
from social_feed.main import create_app

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def days_ago(days: float) -> str:
    return (NOW - timedelta(days=days)).isoformat()


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite:///:memory:",
        "seed_sample_data": True,
        "feed_cache_backend": "memory",
        "otel_exporter_otlp_endpoint": "",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def client():
    """API over the seeded sample dataset."""
    with TestClient(create_app(make_settings())) as c:
        yield c


@pytest.fixture
def empty_client():
    """API over an empty store."""
    with TestClient(create_app(make_settings(seed_sample_data=False))) as c:
        yield c


@pytest.fixture
async def session():
    """Async session on a fresh, empty in-memory database."""
    engine = create_engine(make_settings())
    await init_db(engine)
    sessionmaker = create_sessionmaker(engine)
    async with sessionmaker() as s:
        yield s
    await engine.dispose()


@pytest.fixture
async def async_client():
    """Seeded API driven on the test's own event loop, for concurrent requests."""
    app = create_app(make_settings())
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
