"""
Feed pipeline for GET /feed.

  Stage 0 │ Cache lookup — a hit is returned as-is, nothing is recomputed
  Stage 1 │ Interest profile — contents of posts the user wrote/commented on
  Stage 2 │ Candidate fetch — posts after the cursor matching the profile
  Stage 3 │ Ranking — policy score per candidate, stable sort descending
  Stage 4 │ Cursor + cache store

Store queries are the only suspension points; ranking and cursor
computation run synchronously once the rows are in memory.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Callable

from opentelemetry import trace

from social_feed.feed.cache import FeedCache, cache_key
from social_feed.feed.pagination import next_page
from social_feed.feed.profile import build_profile
from social_feed.feed.ranking import RankedEntry, ScoringPolicy, make_candidate, rank
from social_feed.schemas import FeedEntry, FeedResponse
from social_feed.store import FeedStore
from social_feed.telemetry import FEED_CACHE_REQUESTS, FEED_CANDIDATES_TOTAL, FEED_LATENCY

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_feed_entry(entry: RankedEntry) -> FeedEntry:
    c = entry.candidate
    return FeedEntry(
        id=c.id,
        user_id=c.user_id,
        content=c.content,
        created_at=c.created_at,
        comments_count=c.comments_count,
        recency_score=c.recency_score,
        relevance_score=entry.relevance_score,
        score=entry.score,
    )


class FeedService:
    def __init__(
        self,
        store: FeedStore,
        cache: FeedCache,
        policy: ScoringPolicy,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.store = store
        self.cache = cache
        self.policy = policy
        self.clock = clock

    async def get_feed(self, user_id: str, start_after_id: str, batch_size: int) -> FeedResponse:
        start_time = time.perf_counter()

        with tracer.start_as_current_span("get_feed") as span:
            span.set_attribute("user.id", user_id)
            span.set_attribute("feed.start_after_id", start_after_id)
            span.set_attribute("feed.batch_size", batch_size)

            key = cache_key(user_id, start_after_id, batch_size)
            cached = await self.cache.get(key)
            if cached is not None:
                FEED_CACHE_REQUESTS.labels(result="hit").inc()
                FEED_LATENCY.labels(cache="hit").observe(time.perf_counter() - start_time)
                span.set_attribute("feed.cache", "hit")
                logger.debug("Feed cache hit: %s", key)
                return cached

            FEED_CACHE_REQUESTS.labels(result="miss").inc()
            span.set_attribute("feed.cache", "miss")

            with tracer.start_as_current_span("stage1_profile"):
                profile = await build_profile(self.store, user_id)

            with tracer.start_as_current_span("stage2_candidates"):
                rows = await self.store.fetch_candidates(
                    profile.pattern, start_after_id, batch_size
                )
                now = self.clock()
                candidates = [make_candidate(post, count, now) for post, count in rows]
            FEED_CANDIDATES_TOTAL.inc(len(candidates))

            with tracer.start_as_current_span("stage3_ranking"):
                ranked = rank(candidates, profile, self.policy)

            cursor = next_page(ranked)
            page = FeedResponse(
                feed=[to_feed_entry(e) for e in ranked],
                start_after_id=cursor.next_cursor,
                done=cursor.done,
            )
            await self.cache.put(key, page)

            latency = time.perf_counter() - start_time
            FEED_LATENCY.labels(cache="miss").observe(latency)
            span.set_attribute("feed.posts_returned", len(page.feed))
            logger.info(
                "Feed for user %s (after=%r, size=%s): %d posts, policy=%s, %.1fms",
                user_id, start_after_id, batch_size, len(page.feed), self.policy.name, latency * 1000,
            )
            return page
