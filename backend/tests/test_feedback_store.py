"""
LawDesk Backend — Feedback Store Tests
========================================

What we test:
    ✅ Submissions are always stored unapproved (isApproved in input ignored)
    ✅ Required fields enforced; optional address/occupation
    ✅ Approved vs pending listings, newest first
    ✅ Approve is idempotent; unknown id raises NotFoundError
    ✅ Delete works from either state and is idempotent
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from lawdesk.exceptions import DatabaseError, NotFoundError, ValidationError
from lawdesk.models.feedback import Feedback
from lawdesk.schemas.feedback import FeedbackCreate
from lawdesk.services.feedback_store import FeedbackStore

SUBMISSION = {
    "clientName": "A. Sharma",
    "serviceTaken": "Property Dispute",
    "feedbackContent": "Great service",
}


def make_feedback(name, approved=False, created_at=None):
    fields = dict(
        client_name=name,
        service_taken="Consultation",
        feedback_content=f"Feedback from {name}",
        is_approved=approved,
    )
    if created_at is not None:
        fields["created_at"] = created_at
    return Feedback(**fields)


class TestFeedbackSubmit:

    @pytest.mark.asyncio
    async def test_submit_stores_unapproved(self, db_session):
        feedback = await FeedbackStore(db_session).submit(SUBMISSION)

        assert feedback.client_name == "A. Sharma"
        assert feedback.service_taken == "Property Dispute"
        assert feedback.is_approved is False
        assert feedback.address is None
        assert feedback.occupation is None

    @pytest.mark.asyncio
    async def test_submit_ignores_is_approved(self, db_session):
        store = FeedbackStore(db_session)

        feedback = await store.submit({**SUBMISSION, "isApproved": True})

        assert feedback.is_approved is False
        assert await store.list_approved() == []

    @pytest.mark.asyncio
    async def test_submit_accepts_snake_case(self, db_session):
        feedback = await FeedbackStore(db_session).submit({
            "client_name": "B. Rao",
            "service_taken": "Tax Filing",
            "feedback_content": "Prompt and clear",
            "occupation": "Engineer",
        })
        assert feedback.client_name == "B. Rao"
        assert feedback.occupation == "Engineer"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["clientName", "serviceTaken", "feedbackContent"])
    async def test_submit_missing_required_field(self, db_session, missing):
        data = {k: v for k, v in SUBMISSION.items() if k != missing}

        with pytest.raises(ValidationError) as exc_info:
            await FeedbackStore(db_session).submit(data)

        assert exc_info.value.message == "Error saving feedback"
        assert exc_info.value.context["errors"][0]["field"] == missing

    @pytest.mark.asyncio
    async def test_rejected_insert_keeps_earlier_submission(self, db_session):
        store = FeedbackStore(db_session)
        kept = await store.submit(SUBMISSION)
        # Skips schema validation so the NOT NULL constraint rejects the row
        invalid = FeedbackCreate.model_construct(
            client_name=None,
            address=None,
            occupation=None,
            service_taken="Consultation",
            feedback_content="No name given",
        )

        with pytest.raises(ValidationError, match="Error saving feedback"):
            await store.submit(invalid)

        await db_session.commit()
        assert [f.id for f in await store.list_pending()] == [kept.id]


class TestFeedbackModeration:

    @pytest.mark.asyncio
    async def test_listings_split_by_state_newest_first(self, db_session):
        base = datetime(2024, 3, 1, tzinfo=timezone.utc)
        db_session.add_all([
            make_feedback("old-approved", approved=True, created_at=base),
            make_feedback("new-approved", approved=True, created_at=base + timedelta(days=2)),
            make_feedback("old-pending", created_at=base + timedelta(days=1)),
            make_feedback("new-pending", created_at=base + timedelta(days=3)),
        ])
        await db_session.flush()
        store = FeedbackStore(db_session)

        approved = await store.list_approved()
        pending = await store.list_pending()

        assert [f.client_name for f in approved] == ["new-approved", "old-approved"]
        assert [f.client_name for f in pending] == ["new-pending", "old-pending"]

    @pytest.mark.asyncio
    async def test_approve_moves_to_testimonials(self, db_session):
        store = FeedbackStore(db_session)
        submitted = await store.submit(SUBMISSION)

        approved = await store.approve(submitted.id)

        assert approved.is_approved is True
        assert [f.id for f in await store.list_approved()] == [submitted.id]
        assert await store.list_pending() == []

    @pytest.mark.asyncio
    async def test_approve_twice_stays_approved(self, db_session):
        store = FeedbackStore(db_session)
        submitted = await store.submit(SUBMISSION)

        await store.approve(submitted.id)
        again = await store.approve(submitted.id)

        assert again.is_approved is True
        assert len(await store.list_approved()) == 1

    @pytest.mark.asyncio
    async def test_approve_unknown_id(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await FeedbackStore(db_session).approve(uuid.uuid4())
        assert exc_info.value.context["resource"] == "feedback"

    @pytest.mark.asyncio
    async def test_delete_pending(self, db_session):
        store = FeedbackStore(db_session)
        submitted = await store.submit(SUBMISSION)

        await store.delete(submitted.id)

        assert await store.list_pending() == []

    @pytest.mark.asyncio
    async def test_delete_approved(self, db_session):
        store = FeedbackStore(db_session)
        submitted = await store.submit(SUBMISSION)
        await store.approve(submitted.id)

        await store.delete(submitted.id)

        assert await store.list_approved() == []

    @pytest.mark.asyncio
    async def test_delete_missing_is_success(self, db_session):
        await FeedbackStore(db_session).delete(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_list_database_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))

        with pytest.raises(DatabaseError):
            await FeedbackStore(mock_db_session).list_pending()
