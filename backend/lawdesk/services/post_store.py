"""
LawDesk Backend — Post Store
==============================

What:  All blog-post operations: create, list, filter by category, lookup by
       slug (rendered), delete.
How:   One PostStore is built per request around that request's session
       (see routes/dependencies.py). Collaborators (Markdown renderer, image
       storage, clock) are injected so tests can swap them.
Why:   Routes stay thin, and scripts or tests calling the store directly get the
       same errors the API returns.

Create Flow (POST /add-post):
    ┌──────────┐    ┌──────────────┐    ┌─────────────┐    ┌──────────┐
    │ Validate │───▶│ Store image  │───▶│ Derive slug │───▶│  INSERT  │
    │  fields  │    │  (optional)  │    │ title + ms  │    │ savepoint│
    └──────────┘    └──────────────┘    └─────────────┘    └──────────┘

    Unique slug violation → DuplicateSlugError (409), image removed
    Other integrity error → ValidationError (400), image removed
    Database unreachable  → DatabaseError (500), image removed

Query plans:
    list_all:          ORDER BY created_at DESC               (idx_posts_created_at)
    list_by_category:  WHERE lower(category) = lower(:name) ORDER BY created_at DESC
    get_by_slug:       WHERE slug = :slug                     (uq_posts_slug)
"""

import logging
from typing import Any, Callable, List, Mapping, Optional, Union
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.exceptions import (
    DatabaseError,
    DuplicateSlugError,
    NotFoundError,
    ValidationError,
)
from lawdesk.models.post import Post
from lawdesk.schemas.common import parse_input
from lawdesk.schemas.post import PostCreate, PostResponse
from lawdesk.services.image_storage import ImageStorage, ImageUpload
from lawdesk.services.markdown_renderer import MarkdownRenderer
from lawdesk.services.slug import build_slug, now_millis

logger = logging.getLogger(__name__)

SAVE_ERROR_MESSAGE = "Error saving post"


def is_slug_conflict(error: IntegrityError) -> bool:
    """
    True when an IntegrityError comes from the unique index on posts.slug.

    PostgreSQL reports the constraint name (uq_posts_slug); SQLite reports
    the column (posts.slug).
    """
    text = str(error.orig).lower()
    return "slug" in text and ("unique" in text or "duplicate" in text)


class PostStore:
    """
    Owns post records for the lifetime of one database session.

    Error Handling Strategy:
        SQLAlchemy errors never leave the store raw. Integrity errors become
        DuplicateSlugError or ValidationError; anything else from the driver
        becomes DatabaseError. Nothing is retried.
    """

    def __init__(
        self,
        session: AsyncSession,
        renderer: Optional[MarkdownRenderer] = None,
        images: Optional[ImageStorage] = None,
        clock: Callable[[], int] = now_millis,
    ):
        self.session = session
        self.renderer = renderer or MarkdownRenderer()
        self.images = images
        self.clock = clock

    async def create(
        self,
        data: Union[PostCreate, Mapping[str, Any]],
        image: Optional[ImageUpload] = None,
    ) -> PostResponse:
        """
        Validate, derive the slug, store the optional image, and insert.

        Args:
            data: PostCreate, or raw fields (title, content, author, category)
            image: Optional uploaded image; requires an ImageStorage

        Returns:
            The persisted post (content as Markdown source)

        Raises:
            ValidationError: missing/blank required field, bad image
            DuplicateSlugError: slug already taken
            FileStorageError: image could not be written
            DatabaseError: insert failed for another reason
        """
        if not isinstance(data, PostCreate):
            data = parse_input(PostCreate, data, SAVE_ERROR_MESSAGE)

        image_url: Optional[str] = None
        if image is not None:
            if self.images is None:
                raise ValidationError(
                    message="Image uploads are not configured",
                    field="image",
                )
            image_url = await self.images.store(
                filename=image.filename,
                content=image.content,
                content_type=image.content_type,
            )

        post = Post(
            title=data.title,
            slug=build_slug(data.title, self.clock()),
            content=data.content,
            author=data.author,
            category=data.category,
            image_url=image_url,
        )

        try:
            return await self.save(post)
        except Exception:
            if image_url and self.images is not None:
                await self.images.remove(image_url)
            raise

    async def save(self, post: Post) -> PostResponse:
        """
        Insert a prepared Post exactly as given (slug included).

        Raises DuplicateSlugError if the slug is already taken.

        The insert runs in a SAVEPOINT: a rejected post is rolled back alone,
        and posts saved earlier in the same session stay pending.
        """
        try:
            async with self.session.begin_nested():
                self.session.add(post)
        except IntegrityError as e:
            if is_slug_conflict(e):
                logger.warning("Duplicate slug rejected: %s", post.slug)
                raise DuplicateSlugError(slug=post.slug)
            logger.warning("Post rejected by database constraints: %s", e.orig)
            raise ValidationError(
                message=SAVE_ERROR_MESSAGE,
                context={"cause": str(e.orig)},
            )
        except SQLAlchemyError as e:
            logger.error("Database error saving post: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the post. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Post created: %s (slug=%s)", post.id, post.slug)
        return PostResponse.model_validate(post)

    async def list_all(self) -> List[PostResponse]:
        """All posts, newest first. Unpaginated."""
        return await self._list(select(Post))

    async def list_by_category(self, name: str) -> List[PostResponse]:
        """
        Posts whose category equals `name`, ignoring case. Newest first.

        The raw parameter is matched as-is: "family-law" does not match a
        category stored as "Family Law". No match returns an empty list.
        """
        # Same lower() on both sides: SQLite folds ASCII only, PostgreSQL folds Unicode
        query = select(Post).where(func.lower(Post.category) == func.lower(name))
        return await self._list(query)

    async def _list(self, query) -> List[PostResponse]:
        try:
            result = await self.session.execute(query.order_by(Post.created_at.desc()))
            posts = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve posts. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [PostResponse.model_validate(post) for post in posts]

    async def get_by_slug(self, slug: str) -> PostResponse:
        """
        Exact slug lookup with content rendered from Markdown to HTML.

        Raises:
            NotFoundError: no post has this slug (→ 404)
            DatabaseError: query failed (→ 500)
        """
        try:
            result = await self.session.execute(select(Post).where(Post.slug == slug))
            post = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %s: %s", slug, str(e))
            raise DatabaseError(
                message="Could not retrieve the post. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if post is None:
            raise NotFoundError(resource="post", resource_id=slug)

        response = PostResponse.model_validate(post)
        return response.model_copy(update={"content": self.renderer.render(post.content)})

    async def delete(self, post_id: UUID) -> None:
        """
        Delete by id, then its stored image (best effort).

        Deleting an id that does not exist is not an error.
        """
        try:
            image_url = await self.session.scalar(
                select(Post.image_url).where(Post.id == post_id)
            )
            result = await self.session.execute(delete(Post).where(Post.id == post_id))
        except SQLAlchemyError as e:
            logger.error("Database error deleting post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not delete the post. Please try again.",
                context={"error_type": type(e).__name__},
            )
        logger.info("Delete post %s: %d row(s) removed", post_id, result.rowcount)

        if image_url and self.images is not None:
            await self.images.remove(image_url)
