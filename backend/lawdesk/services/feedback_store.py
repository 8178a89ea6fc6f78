"""
LawDesk Backend — Feedback Store
==================================

What:  Client testimonials and their moderation lifecycle.
Who:   Built per request by routes/dependencies.py.
Why:   Approval is the only mutation, so it lives beside the queries that
       filter on it.

Lifecycle:
    submit()   → row inserted with is_approved = false (always)
    approve()  → is_approved = true (idempotent, no way back)
    delete()   → row removed from either state (idempotent)

Public pages read list_approved(); the moderation queue reads list_pending().
Both are ordered newest first.
"""

import logging
from typing import Any, List, Mapping, Union
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.exceptions import DatabaseError, NotFoundError, ValidationError
from lawdesk.models.feedback import Feedback
from lawdesk.schemas.common import parse_input
from lawdesk.schemas.feedback import FeedbackCreate, FeedbackResponse

logger = logging.getLogger(__name__)


class FeedbackStore:
    """Owns feedback records for the lifetime of one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def submit(
        self,
        data: Union[FeedbackCreate, Mapping[str, Any]],
    ) -> FeedbackResponse:
        """
        Persist a new testimonial as unapproved.

        Raw mappings are validated first; an `isApproved` key, if present,
        is discarded along with any other unknown key.

        Raises:
            ValidationError: missing or blank required field (→ 400)
            DatabaseError: insert failed (→ 500)
        """
        if not isinstance(data, FeedbackCreate):
            data = parse_input(FeedbackCreate, data, "Error saving feedback")

        feedback = Feedback(**data.model_dump(), is_approved=False)
        # SAVEPOINT: a failed insert leaves the rest of the session untouched
        try:
            async with self.session.begin_nested():
                self.session.add(feedback)
        except IntegrityError as e:
            raise ValidationError(
                message="Error saving feedback",
                context={"cause": str(e.orig)},
            )
        except SQLAlchemyError as e:
            logger.error("Database error saving feedback: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save your feedback. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Feedback submitted: %s (pending approval)", feedback.id)
        return FeedbackResponse.model_validate(feedback)

    async def list_approved(self) -> List[FeedbackResponse]:
        """Approved testimonials for public display, newest first."""
        return await self._list(approved=True)

    async def list_pending(self) -> List[FeedbackResponse]:
        """Moderation queue, newest first."""
        return await self._list(approved=False)

    async def _list(self, approved: bool) -> List[FeedbackResponse]:
        query = (
            select(Feedback)
            .where(Feedback.is_approved == approved)
            .order_by(Feedback.created_at.desc())
        )
        try:
            result = await self.session.execute(query)
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing feedback: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve feedback. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [FeedbackResponse.model_validate(row) for row in rows]

    async def approve(self, feedback_id: UUID) -> FeedbackResponse:
        """
        Mark a testimonial approved. Approving twice leaves it approved.

        Raises:
            NotFoundError: no feedback with this id (→ 404)
        """
        try:
            feedback = await self.session.get(Feedback, feedback_id)
            if feedback is None:
                raise NotFoundError(resource="feedback", resource_id=str(feedback_id))
            feedback.is_approved = True
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Database error approving feedback %s: %s", feedback_id, str(e))
            raise DatabaseError(
                message="Could not approve the feedback. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Feedback approved: %s", feedback_id)
        return FeedbackResponse.model_validate(feedback)

    async def delete(self, feedback_id: UUID) -> None:
        """Delete by id, approved or not. A missing id is not an error."""
        try:
            result = await self.session.execute(
                delete(Feedback).where(Feedback.id == feedback_id)
            )
        except SQLAlchemyError as e:
            logger.error("Database error deleting feedback %s: %s", feedback_id, str(e))
            raise DatabaseError(
                message="Could not delete the feedback. Please try again.",
                context={"error_type": type(e).__name__},
            )
        logger.info("Delete feedback %s: %d row(s) removed", feedback_id, result.rowcount)
