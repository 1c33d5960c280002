"""
Post endpoints:
  POST /posts      — create a post
  GET  /posts/{id} — fetch a post and its comments
"""
import logging

from fastapi import APIRouter, Depends, status
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from social_feed.database import get_db
from social_feed.schemas import (
    CommentResponse,
    ErrorResponse,
    MessageResponse,
    PostCreate,
    PostResponse,
    PostWithComments,
)
from social_feed.store import FeedStore
from social_feed.telemetry import POST_INGESTION_TOTAL

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_post(body: PostCreate, db: AsyncSession = Depends(get_db)):
    """
    Create a post authored by an existing user; ``created_at`` is stamped
    server-side. Cached feed pages are not invalidated.
    """
    with tracer.start_as_current_span("create_post") as span:
        span.set_attribute("post.id", body.id)
        span.set_attribute("post.user_id", body.user_id)
        await FeedStore(db).create_post(body.id, body.user_id, body.content)
        POST_INGESTION_TOTAL.inc()
        return MessageResponse(message="Post created successfully")


@router.get("/{post_id}", response_model=PostWithComments, responses={404: {"model": ErrorResponse}})
async def get_post(post_id: str, db: AsyncSession = Depends(get_db)):
    post, comments = await FeedStore(db).get_post_with_comments(post_id)
    return PostWithComments(
        post=PostResponse.model_validate(post),
        comments=[CommentResponse.model_validate(c) for c in comments],
    )
