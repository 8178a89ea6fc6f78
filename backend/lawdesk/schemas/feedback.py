"""
LawDesk Backend — Feedback Schemas
====================================

What:  Input and output contracts for client testimonials.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from lawdesk.schemas.common import CamelModel


class FeedbackCreate(CamelModel):
    """
    Public submission body for POST /add-feedback.

    Unknown keys, including `isApproved`, are ignored: approval is never
    part of the input.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    client_name: str = Field(min_length=1, max_length=255)
    address: Optional[str] = Field(default=None, max_length=255)
    occupation: Optional[str] = Field(default=None, max_length=255)
    service_taken: str = Field(min_length=1, max_length=255)
    feedback_content: str = Field(min_length=1)


class FeedbackResponse(CamelModel):
    """A stored testimonial, in either approval state."""

    id: uuid.UUID
    client_name: str
    address: Optional[str] = None
    occupation: Optional[str] = None
    service_taken: str
    feedback_content: str
    is_approved: bool
    created_at: datetime
    updated_at: datetime
