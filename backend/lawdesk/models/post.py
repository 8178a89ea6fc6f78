"""
LawDesk Backend — Post SQLAlchemy Model
=========================================

What:  ORM model representing the `posts` table.
Who:   Used by PostStore for create/list/lookup/delete and by Alembic.

Table Design:
    - UUID primary key, assigned in Python at insert time
    - slug: unique (uq_posts_slug); derived from the title once, never rewritten
    - content: Markdown source; HTML is produced on read, never stored
    - image_url: relative reference returned by ImageStorage (uploads/<file>)
    - created_at / updated_at: UTC, assigned by the store

    Index on created_at:
        Every list query orders by created_at DESC (newest first).
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from lawdesk.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    A blog post on the firm's website.

    Lifecycle:
        1. Created via POST /add-post with a derived slug
        2. Never updated in place
        3. Hard-deleted by id (no soft delete)
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    # Lookup key for GET /posts/{slug}; uniqueness enforced by the database
    slug: Mapped[str] = mapped_column(String(320), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    author: Mapped[str] = mapped_column(String(255), nullable=False)

    # Matched case-insensitively by GET /posts/category/{name}
    category: Mapped[str] = mapped_column(String(255), nullable=False)

    image_url: Mapped[Optional[str]] = mapped_column(
        String(512),
        nullable=True,
        default=None,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("slug", name="uq_posts_slug"),
        Index("idx_posts_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, slug='{self.slug}')>"
