"""
Configuration management using Pydantic BaseSettings.
All values can be overridden via environment variables or a .env file.
"""
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Store (SQLite in memory by default) ────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///:memory:"
    sql_echo: bool = False
    seed_sample_data: bool = True        # 10 users, 5 posts, 10 comments

    # ── Feed paging ────────────────────────────────────────────────────────
    feed_page_size: int = 20             # default batch_size
    feed_max_page_size: int = 100

    # ── Scoring policy ─────────────────────────────────────────────────────
    scoring_policy: Literal["weighted_linear", "keyword_frequency"] = "weighted_linear"
    score_comments_weight: float = 1.2
    score_recency_weight: float = 0.8
    score_match_relevance: float = 1.5
    score_miss_relevance: float = 1.0
    keyword_comments_weight: float = 2.0

    # ── Feed response cache ────────────────────────────────────────────────
    feed_cache_backend: Literal["memory", "redis"] = "memory"
    redis_host: str = "redis"
    redis_port: int = 6379

    # ── Observability ──────────────────────────────────────────────────────
    # Empty endpoint disables span export (spans are still created).
    otel_exporter_otlp_endpoint: str = ""
    service_name: str = "social-feed-api"
    environment: str = "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
