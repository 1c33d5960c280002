"""
Feed response cache.

Memoizes the rendered feed page per (user_id, start_after_id, batch_size).
Entries never expire and are never invalidated: new posts and comments do not
show up for a key that is already cached until the process restarts.

The cache is created once at startup and owned by the application
(``app.state.feed_cache``).
"""
import json
from abc import ABC, abstractmethod
from threading import Lock
from typing import Optional

from social_feed.schemas import FeedResponse

FEED_KEY_PREFIX = "feed:"


def cache_key(user_id: str, start_after_id: str, batch_size: int) -> str:
    # JSON-encoded parts: ids may contain ':' or any other separator
    return FEED_KEY_PREFIX + json.dumps([user_id, start_after_id, batch_size], separators=(",", ":"))


class FeedCache(ABC):
    @abstractmethod
    async def get(self, key: str) -> Optional[FeedResponse]:
        ...

    @abstractmethod
    async def put(self, key: str, page: FeedResponse) -> None:
        ...

    async def close(self) -> None:
        pass


class MemoryFeedCache(FeedCache):
    """Unbounded in-process dict. Safe to share between concurrent requests."""

    def __init__(self) -> None:
        self._pages: dict[str, FeedResponse] = {}
        self._lock = Lock()

    async def get(self, key: str) -> Optional[FeedResponse]:
        with self._lock:
            return self._pages.get(key)

    async def put(self, key: str, page: FeedResponse) -> None:
        # Last writer wins when two misses for the same key race
        with self._lock:
            self._pages[key] = page

    def __len__(self) -> int:
        with self._lock:
            return len(self._pages)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._pages
