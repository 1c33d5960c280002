"""
Sample dataset loaded at startup when Settings.seed_sample_data is on.

Creates:
  • 10 users      — ids "0".."9", names User0..User9
  • 5 posts       — ids "0".."4", "Post content {i}", author i % 10
  • 10 comments   — ids "0".."9", "Comment content {i}", post i % 5, author i % 10

Seeding is skipped when user "0" already exists, so a persistent database is
only seeded once.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from social_feed.models import User
from social_feed.store import FeedStore, utc_now_iso

logger = logging.getLogger(__name__)

NUM_USERS = 10
NUM_POSTS = 5
NUM_COMMENTS = 10


async def seed_sample_data(sessionmaker: async_sessionmaker[AsyncSession]) -> None:
    async with sessionmaker() as session:
        if await session.get(User, "0"):
            logger.info("Sample data already present, skipping seed")
            return

        store = FeedStore(session)
        created_at = utc_now_iso()

        for i in range(NUM_USERS):
            await store.create_user(str(i), f"User{i}")
        for i in range(NUM_POSTS):
            await store.create_post(str(i), str(i % NUM_USERS), f"Post content {i}", created_at)
        for i in range(NUM_COMMENTS):
            await store.create_comment(
                str(i), str(i % NUM_POSTS), str(i % NUM_USERS), f"Comment content {i}", created_at
            )

    logger.info(
        "Seeded %d users, %d posts, %d comments", NUM_USERS, NUM_POSTS, NUM_COMMENTS
    )
