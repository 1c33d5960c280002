"""
Store adapter: every query the API and the feed engine run against
users / posts / comments.

Driver failures are re-raised as StoreError carrying the driver message, so
routers never see SQLAlchemy exceptions.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from social_feed.errors import ConflictError, NotFoundError, StoreError
from social_feed.models import Comment, Post, User

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@asynccontextmanager
async def _store_errors(message: str):
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("%s: %s", message, exc)
        raise StoreError(message, str(exc)) from exc


class FeedStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_user(self, user_id: str, name: str) -> User:
        async with _store_errors("Failed to add user"):
            if await self.session.get(User, user_id):
                raise ConflictError(f"User '{user_id}' already exists")
            user = User(id=user_id, name=name)
            self.session.add(user)
            await self.session.commit()
        logger.info("Created user %s", user_id)
        return user

    async def create_post(
        self, post_id: str, user_id: str, content: str, created_at: Optional[str] = None
    ) -> Post:
        async with _store_errors("Failed to create post"):
            if not await self.session.get(User, user_id):
                raise NotFoundError("User not found")
            if await self.session.get(Post, post_id):
                raise ConflictError(f"Post '{post_id}' already exists")
            post = Post(
                id=post_id,
                user_id=user_id,
                content=content,
                created_at=created_at or utc_now_iso(),
            )
            self.session.add(post)
            await self.session.commit()
        logger.info("Post created: %s by user %s", post_id, user_id)
        return post

    async def create_comment(
        self,
        comment_id: str,
        post_id: str,
        user_id: str,
        content: str,
        created_at: Optional[str] = None,
    ) -> Comment:
        async with _store_errors("Failed to create comment"):
            if await self.session.get(Comment, comment_id):
                raise ConflictError(f"Comment '{comment_id}' already exists")
            comment = Comment(
                id=comment_id,
                post_id=post_id,
                user_id=user_id,
                content=content,
                created_at=created_at or utc_now_iso(),
            )
            self.session.add(comment)
            await self.session.commit()
        logger.info("Comment created: %s on post %s by user %s", comment_id, post_id, user_id)
        return comment

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_user(self, user_id: str) -> User:
        async with _store_errors("Failed to fetch user"):
            user = await self.session.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def get_post_with_comments(self, post_id: str) -> tuple[Post, list[Comment]]:
        async with _store_errors("Failed to fetch post"):
            post = await self.session.get(Post, post_id)
        if not post:
            raise NotFoundError("Post not found")

        async with _store_errors("Failed to fetch comments"):
            rows = await self.session.execute(
                select(Comment).where(Comment.post_id == post_id).order_by(Comment.id)
            )
        return post, list(rows.scalars().all())

    async def fetch_interaction_contents(self, user_id: str) -> list[str]:
        """
        Distinct contents of the posts ``user_id`` wrote or commented on,
        in post id order.
        """
        stmt = (
            select(Post.id, Post.content)
            .outerjoin(Comment, Comment.post_id == Post.id)
            .where(or_(Post.user_id == user_id, Comment.user_id == user_id))
            .distinct()
            .order_by(Post.id)
        )
        async with _store_errors("Failed to fetch user interactions"):
            rows = await self.session.execute(stmt)

        contents: list[str] = []
        seen: set[str] = set()
        for _, content in rows.all():
            if content not in seen:
                seen.add(content)
                contents.append(content)
        return contents

    async def fetch_candidates(
        self, pattern: str, start_after_id: str, batch_size: int
    ) -> list[tuple[Post, int]]:
        """
        Posts with ``id > start_after_id`` whose content contains ``pattern``
        (case-sensitive, literal), in id order, with their comment counts.

        An empty pattern places no restriction on content.
        """
        comment_counts = (
            select(Comment.post_id, func.count().label("comments_count"))
            .group_by(Comment.post_id)
            .subquery()
        )
        stmt = (
            select(Post, func.coalesce(comment_counts.c.comments_count, 0))
            .outerjoin(comment_counts, Post.id == comment_counts.c.post_id)
            .where(Post.id > start_after_id)
            .order_by(Post.id)
            .limit(batch_size)
        )
        if pattern:
            # Literal and case-sensitive: % and _ in the pattern are plain text
            stmt = stmt.where(func.instr(Post.content, pattern) > 0)

        async with _store_errors("Failed to fetch feed"):
            rows = await self.session.execute(stmt)
        return [(post, int(count)) for post, count in rows.all()]
