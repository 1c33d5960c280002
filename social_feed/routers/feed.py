"""
Feed retrieval endpoint — GET /feed?user_id=<id>[&batch_size=20][&start_after_id=<post id>]

Returns one ranked page of the user's personalized feed:

  {"feed": [...], "start_after_id": "<cursor>", "done": false}
  {"feed": [], "done": true}                      (no more matching posts)

Pages are memoized per (user_id, start_after_id, batch_size) for the life of
the process; see social_feed.feed.service for the pipeline.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from social_feed.database import get_db
from social_feed.errors import ValidationError
from social_feed.feed.pagination import START_CURSOR
from social_feed.feed.service import FeedService
from social_feed.schemas import ErrorResponse, FeedResponse
from social_feed.store import FeedStore

logger = logging.getLogger(__name__)
router = APIRouter()


def get_feed_service(request: Request, db: AsyncSession = Depends(get_db)) -> FeedService:
    return FeedService(
        store=FeedStore(db),
        cache=request.app.state.feed_cache,
        policy=request.app.state.scoring_policy,
    )


@router.get(
    "",
    response_model=FeedResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_feed(
    request: Request,
    user_id: Optional[str] = Query(None, description="ID of the requesting user"),
    batch_size: Optional[int] = Query(None, description="Posts per page"),
    start_after_id: str = Query(START_CURSOR, description="Cursor from the previous page"),
    service: FeedService = Depends(get_feed_service),
):
    if not user_id:
        raise ValidationError("User ID is required")

    settings = request.app.state.settings
    if batch_size is None:
        batch_size = settings.feed_page_size
    if not 1 <= batch_size <= settings.feed_max_page_size:
        raise ValidationError(
            "Invalid batch_size",
            f"batch_size must be between 1 and {settings.feed_max_page_size}",
        )

    return await service.get_feed(user_id, start_after_id, batch_size)
