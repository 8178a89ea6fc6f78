"""
LawDesk Backend — Route Dependencies
======================================

What:  FastAPI dependencies that build per-request collaborators.
How:   Settings and the Database live on `app.state` (set by create_app);
       each request gets its own session and a store wrapped around it.
Why:   Stores never reach for a global session, so each test can hand in its
       own database.

    get_db_session ──▶ get_post_store      (+ ImageStorage, MarkdownRenderer)
                   └─▶ get_feedback_store

    require_admin: guards moderation/delete routes with X-Admin-Key.
"""

import logging
import secrets
from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.config import Settings
from lawdesk.database import get_db_session
from lawdesk.exceptions import UnauthorizedError
from lawdesk.services.feedback_store import FeedbackStore
from lawdesk.services.image_storage import ImageStorage
from lawdesk.services.markdown_renderer import MarkdownRenderer
from lawdesk.services.post_store import PostStore

logger = logging.getLogger(__name__)

admin_key_header = APIKeyHeader(name="X-Admin-Key", auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage


def get_renderer(request: Request) -> MarkdownRenderer:
    return request.app.state.renderer


def get_post_store(
    db: AsyncSession = Depends(get_db_session),
    images: ImageStorage = Depends(get_image_storage),
    renderer: MarkdownRenderer = Depends(get_renderer),
) -> PostStore:
    return PostStore(db, renderer=renderer, images=images)


def get_feedback_store(db: AsyncSession = Depends(get_db_session)) -> FeedbackStore:
    return FeedbackStore(db)


def require_admin(
    settings: Settings = Depends(get_settings),
    api_key: Optional[str] = Security(admin_key_header),
) -> None:
    """
    Allow the request when no admin key is configured, or when the
    X-Admin-Key header matches it.
    """
    if not settings.moderation_enabled:
        return
    if api_key is None or not secrets.compare_digest(api_key, settings.admin_api_key):
        logger.warning("Rejected admin request: missing or invalid X-Admin-Key")
        raise UnauthorizedError()
