"""
LawDesk Backend — Post Route Handlers
=======================================

What:  Blog post endpoints.

    GET    /posts                  → PostStore.list_all
    GET    /posts/category/{name}  → PostStore.list_by_category
    GET    /posts/{slug}           → PostStore.get_by_slug (content rendered to HTML)
    POST   /add-post               → PostStore.create (multipart, optional `image`)
    DELETE /posts/{post_id}        → PostStore.delete (admin)

Routes stay thin: read the request, call the store, return the schema.
Errors are formatted by the global handlers in main.py.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile

from lawdesk.routes.dependencies import get_image_storage, get_post_store, require_admin
from lawdesk.schemas.common import ErrorResponse, MessageResponse
from lawdesk.schemas.post import PostResponse
from lawdesk.services.image_storage import ImageStorage, ImageUpload
from lawdesk.services.post_store import PostStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Posts"])


@router.get(
    "/posts",
    response_model=List[PostResponse],
    summary="List all posts, newest first",
)
async def list_posts(store: PostStore = Depends(get_post_store)) -> List[PostResponse]:
    return await store.list_all()


@router.get(
    "/posts/category/{name}",
    response_model=List[PostResponse],
    summary="List posts in a category",
    description=(
        "Case-insensitive exact match on the category name as given. "
        "Returns an empty list when nothing matches."
    ),
)
async def list_posts_by_category(
    name: str,
    store: PostStore = Depends(get_post_store),
) -> List[PostResponse]:
    return await store.list_by_category(name)


@router.get(
    "/posts/{slug}",
    response_model=PostResponse,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Get a single post with its content rendered to HTML",
)
async def get_post(slug: str, store: PostStore = Depends(get_post_store)) -> PostResponse:
    return await store.get_by_slug(slug)


async def read_image(image: UploadFile, images: ImageStorage) -> ImageUpload:
    """
    Read an uploaded image without holding more than max_size + 1 bytes.

    Why: the multipart part is spooled to disk by Starlette; reading it whole
    before checking its size would let one request pull any amount into memory.
    """
    try:
        if image.size is not None:
            images.validate_size(image.size)
        content = await image.read(images.max_size + 1)
    finally:
        await image.close()
    images.validate_size(len(content))
    return ImageUpload(filename=image.filename, content=content, content_type=image.content_type)


@router.post(
    "/add-post",
    status_code=201,
    response_model=PostResponse,
    responses={
        400: {"description": "Missing field or invalid image", "model": ErrorResponse},
        409: {"description": "Slug already exists", "model": ErrorResponse},
    },
    summary="Create a post (multipart form, optional image)",
)
async def add_post(
    title: Optional[str] = Form(default=None),
    content: Optional[str] = Form(default=None, description="Markdown source"),
    author: Optional[str] = Form(default=None),
    category: Optional[str] = Form(default=None),
    image: Optional[UploadFile] = File(default=None, description="Optional cover image"),
    images: ImageStorage = Depends(get_image_storage),
    store: PostStore = Depends(get_post_store),
) -> PostResponse:
    """
    Create a post from form fields.

    Fields are optional at the HTTP layer so that a missing field produces
    the store's "Error saving post" validation error (400) with the cause.
    Browsers send an empty file part when no image is chosen; it is ignored.
    """
    upload: Optional[ImageUpload] = None
    if image is not None and image.filename:
        upload = await read_image(image, images)
        logger.info("Received image %s (%d bytes)", upload.filename, len(upload.content))

    fields = {"title": title, "content": content, "author": author, "category": category}
    return await store.create(fields, image=upload)


@router.delete(
    "/posts/{post_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
    summary="Delete a post (idempotent)",
)
async def delete_post(
    post_id: UUID,
    store: PostStore = Depends(get_post_store),
) -> MessageResponse:
    await store.delete(post_id)
    return MessageResponse(message="Post deleted.")
