"""
User management endpoints:
  POST /users      — create a user
  GET  /users/{id} — fetch a user
"""
import logging

from fastapi import APIRouter, Depends, status
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from social_feed.database import get_db
from social_feed.schemas import ErrorResponse, MessageResponse, UserCreate, UserResponse
from social_feed.store import FeedStore

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    """
    Register a new user. Ids are unique: a second create with the same id is
    rejected with 409 and the stored user is left unchanged.
    """
    with tracer.start_as_current_span("create_user") as span:
        span.set_attribute("user.id", body.id)
        await FeedStore(db).create_user(body.id, body.name)
        return MessageResponse(message="User added successfully")


@router.get("/{user_id}", response_model=UserResponse, responses={404: {"model": ErrorResponse}})
async def get_user(user_id: str, db: AsyncSession = Depends(get_db)):
    return await FeedStore(db).get_user(user_id)
