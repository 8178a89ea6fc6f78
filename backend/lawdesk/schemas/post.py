"""
LawDesk Backend — Post Schemas
================================

What:  Input and output contracts for blog posts.
Who:   PostCreate is built by POST /add-post from multipart form fields;
       PostResponse is returned by every post endpoint.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from lawdesk.schemas.common import CamelModel


class PostCreate(CamelModel):
    """
    Caller-supplied post fields. Slug and timestamps are never accepted.

    Surrounding whitespace is stripped, so a blank title fails min_length.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1, description="Markdown source")
    author: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=255)


class PostResponse(CamelModel):
    """
    What:  Full representation of a stored post.

    `content` is Markdown for list endpoints and rendered HTML for
    GET /posts/{slug}.
    """

    id: uuid.UUID
    title: str
    slug: str
    content: str
    author: str
    category: str
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
