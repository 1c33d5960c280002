"""
Pydantic request / response schemas for the API layer.
Kept separate from ORM models to avoid coupling transport to storage.

Identifier fields are strings; JSON numbers are accepted and coerced to their
decimal form so numeric ids (``{"id": 7}``) keep working. Empty strings are
rejected the same way an absent field is.
"""
from typing import Optional

from pydantic import BaseModel, Field


class _Body(BaseModel):
    class Config:
        coerce_numbers_to_str = True


# ──────────────────────────── Users ───────────────────────────────────────

class UserCreate(_Body):
    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)


class UserResponse(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


# ──────────────────────────── Posts ───────────────────────────────────────

class PostCreate(_Body):
    id: str = Field(..., min_length=1, max_length=64)
    user_id: str = Field(..., min_length=1, max_length=64)
    content: str = Field(..., min_length=1)


class PostResponse(BaseModel):
    id: str
    user_id: str
    content: str
    created_at: str

    class Config:
        from_attributes = True


# ──────────────────────────── Comments ────────────────────────────────────

class CommentCreate(_Body):
    id: str = Field(..., min_length=1, max_length=64)
    post_id: str = Field(..., min_length=1, max_length=64)
    user_id: str = Field(..., min_length=1, max_length=64)
    content: str = Field(..., min_length=1)


class CommentResponse(BaseModel):
    id: str
    post_id: str
    user_id: str
    content: str
    created_at: str

    class Config:
        from_attributes = True


class PostWithComments(BaseModel):
    post: PostResponse
    comments: list[CommentResponse]


# ──────────────────────────── Feed ────────────────────────────────────────

class FeedEntry(BaseModel):
    """A ranked post returned in the feed."""
    id: str
    user_id: str
    content: str
    created_at: str
    # Ranking signals exposed for debugging / learning
    comments_count: int
    recency_score: float     # age in fractional days
    relevance_score: float
    score: float


class FeedResponse(BaseModel):
    """
    One page of a user's feed. ``start_after_id`` is the cursor for the next
    page and is present iff ``feed`` is non-empty iff ``done`` is false.
    """
    feed: list[FeedEntry]
    start_after_id: Optional[str] = None
    done: bool = False


# ──────────────────────────── Misc ────────────────────────────────────────

class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
