"""
LawDesk Backend — Feedback SQLAlchemy Model
=============================================

What:  ORM model representing the `feedback` table (client testimonials).
Who:   Used by FeedbackStore and by Alembic.

Approval state machine:
    unapproved (is_approved = false)  ──Approve──▶  approved (is_approved = true)
    Delete is a valid exit from either state. There is no reverse transition.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, String, Text, Uuid, false, text
from sqlalchemy.orm import Mapped, mapped_column

from lawdesk.database import Base
from lawdesk.models.post import utcnow


class Feedback(Base):
    """
    A testimonial submitted by a client, shown publicly once approved.

    Query Patterns:
        - Public testimonials: WHERE is_approved ORDER BY created_at DESC
        - Moderation queue:    WHERE NOT is_approved ORDER BY created_at DESC
    """

    __tablename__ = "feedback"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    occupation: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    service_taken: Mapped[str] = mapped_column(String(255), nullable=False)
    feedback_content: Mapped[str] = mapped_column(Text, nullable=False)

    # Never inserted as true; only FeedbackStore.approve() sets it
    is_approved: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
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
        Index("idx_feedback_approved_created_at", "is_approved", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Feedback(id={self.id}, client_name='{self.client_name}', "
            f"is_approved={self.is_approved})>"
        )
