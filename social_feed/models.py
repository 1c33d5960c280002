"""
SQLAlchemy ORM models.

Tables:
  user    — user profiles
  post    — posts, one author each
  comment — comments, one post and one author each

Identifiers are client-supplied strings. ``created_at`` is kept as ISO-8601
text so the ranking stage owns timestamp parsing (and its failure mode).
"""
from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from social_feed.database import Base


class User(Base):
    __tablename__ = "user"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class Post(Base):
    __tablename__ = "post"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("user.id"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)

    __table_args__ = (
        Index("idx_post_user_created_at", "user_id", "created_at"),
    )


class Comment(Base):
    __tablename__ = "comment"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    # Not enforced by SQLite unless PRAGMA foreign_keys is on; comments on
    # unknown posts are accepted, as in the original API.
    post_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("post.id"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("user.id"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)

    __table_args__ = (
        Index("idx_comment_post_user", "post_id", "user_id"),
    )
