"""
Comment endpoints:
  POST /comments — comment on a post
"""
import logging

from fastapi import APIRouter, Depends, status
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from social_feed.database import get_db
from social_feed.schemas import CommentCreate, ErrorResponse, MessageResponse
from social_feed.store import FeedStore
from social_feed.telemetry import COMMENT_INGESTION_TOTAL

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_comment(body: CommentCreate, db: AsyncSession = Depends(get_db)):
    """
    Attach a comment to a post. The referenced post and user are not checked,
    matching the write path's original contract.
    """
    with tracer.start_as_current_span("create_comment") as span:
        span.set_attribute("comment.post_id", body.post_id)
        await FeedStore(db).create_comment(body.id, body.post_id, body.user_id, body.content)
        COMMENT_INGESTION_TOTAL.inc()
        return MessageResponse(message="Comment created successfully")
