"""
Forward-only, stateless paging over the ranked feed.

The cursor is the id of the last entry of the returned (ranked) batch. An
empty batch means no more posts match the user's filter after the cursor,
not that the post table is exhausted.
"""
from dataclasses import dataclass
from typing import Optional

from social_feed.feed.ranking import RankedEntry

START_CURSOR = ""   # sorts before every id


@dataclass(frozen=True)
class PageCursor:
    next_cursor: Optional[str]
    done: bool


def next_page(batch: list[RankedEntry]) -> PageCursor:
    if not batch:
        return PageCursor(next_cursor=None, done=True)
    return PageCursor(next_cursor=batch[-1].candidate.id, done=False)
