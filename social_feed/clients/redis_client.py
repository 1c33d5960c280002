"""
Redis client wrapper.

Responsibilities:
  • Feed pages — STRING (JSON) keyed by feed:["<user_id>","<start_after_id>",<batch_size>]
                 no TTL, same memoization semantics as the in-process cache

Used when Settings.feed_cache_backend == "redis". The API reads and writes
pages during GET /feed; nothing else touches these keys.
"""
import logging
from typing import Optional

import redis.asyncio as aioredis

from social_feed.config import Settings
from social_feed.feed.cache import FeedCache
from social_feed.schemas import FeedResponse

logger = logging.getLogger(__name__)


async def init_redis(settings: Settings) -> aioredis.Redis:
    client = aioredis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        decode_responses=True,
    )
    await client.ping()
    logger.info("Redis connected at %s:%s", settings.redis_host, settings.redis_port)
    return client


class RedisFeedCache(FeedCache):
    def __init__(self, client: aioredis.Redis):
        self._redis = client

    async def get(self, key: str) -> Optional[FeedResponse]:
        raw = await self._redis.get(key)
        if raw:
            return FeedResponse.model_validate_json(raw)
        return None

    async def put(self, key: str, page: FeedResponse) -> None:
        await self._redis.set(key, page.model_dump_json())

    async def close(self) -> None:
        await self._redis.aclose()
