"""
LawDesk Backend — Feedback Route Handlers
===========================================

What:  Testimonial submission, public listing and moderation.

    POST   /add-feedback            → FeedbackStore.submit        (public)
    GET    /testimonials            → FeedbackStore.list_approved (public)
    GET    /feedback/pending        → FeedbackStore.list_pending  (admin)
    PUT    /feedback/approve/{id}   → FeedbackStore.approve       (admin)
    DELETE /feedback/{id}           → FeedbackStore.delete        (admin)
"""

from typing import Any, Dict, List
from uuid import UUID

from fastapi import APIRouter, Body, Depends

from lawdesk.routes.dependencies import get_feedback_store, require_admin
from lawdesk.schemas.common import ErrorResponse, MessageResponse
from lawdesk.schemas.feedback import FeedbackResponse
from lawdesk.services.feedback_store import FeedbackStore

router = APIRouter(tags=["Feedback"])

admin_router = APIRouter(
    prefix="/feedback",
    tags=["Moderation"],
    dependencies=[Depends(require_admin)],
    responses={401: {"description": "Missing or invalid X-Admin-Key", "model": ErrorResponse}},
)


@router.post(
    "/add-feedback",
    status_code=201,
    response_model=FeedbackResponse,
    responses={400: {"description": "Missing required field", "model": ErrorResponse}},
    summary="Submit a testimonial (stored unapproved)",
)
async def add_feedback(
    payload: Dict[str, Any] = Body(
        ...,
        examples=[{
            "clientName": "A. Sharma",
            "serviceTaken": "Property Dispute",
            "feedbackContent": "Great service",
        }],
    ),
    store: FeedbackStore = Depends(get_feedback_store),
) -> FeedbackResponse:
    # Validated by the store so missing fields report as "Error saving feedback"
    return await store.submit(payload)


@router.get(
    "/testimonials",
    response_model=List[FeedbackResponse],
    summary="Approved testimonials, newest first",
)
async def list_testimonials(
    store: FeedbackStore = Depends(get_feedback_store),
) -> List[FeedbackResponse]:
    return await store.list_approved()


@admin_router.get(
    "/pending",
    response_model=List[FeedbackResponse],
    summary="Moderation queue, newest first",
)
async def list_pending_feedback(
    store: FeedbackStore = Depends(get_feedback_store),
) -> List[FeedbackResponse]:
    return await store.list_pending()


@admin_router.put(
    "/approve/{feedback_id}",
    response_model=FeedbackResponse,
    responses={404: {"description": "Feedback not found", "model": ErrorResponse}},
    summary="Approve a testimonial (idempotent)",
)
async def approve_feedback(
    feedback_id: UUID,
    store: FeedbackStore = Depends(get_feedback_store),
) -> FeedbackResponse:
    return await store.approve(feedback_id)


@admin_router.delete(
    "/{feedback_id}",
    response_model=MessageResponse,
    summary="Delete a testimonial in either state (idempotent)",
)
async def delete_feedback(
    feedback_id: UUID,
    store: FeedbackStore = Depends(get_feedback_store),
) -> MessageResponse:
    await store.delete(feedback_id)
    return MessageResponse(message="Feedback deleted.")
