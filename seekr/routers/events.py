"""Event delivery API router for the Seekr review notifier."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, Field

from seekr.dependencies import get_trigger
from seekr.exceptions import AuditWriteError
from seekr.models.debug_notification import DebugStatus
from seekr.services.review_trigger import ReviewNotificationTrigger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])


class EventOutcome(BaseModel):
    """Terminal outcome of one delivered review event."""

    review_id: str = Field(..., description="Review the event was delivered for")
    status: DebugStatus = Field(..., description="Recorded outcome")


@router.post("/reviews/{review_id}", response_model=EventOutcome)
async def review_created(
    review_id: str,
    review: Optional[Dict[str, Any]] = Body(default=None),
    trigger: ReviewNotificationTrigger = Depends(get_trigger),
) -> EventOutcome:
    """
    Deliver a review-created event.

    The body is the created review document (``huntId``, ``comment``, ...).
    Every outcome, including "no notification sent", is acknowledged with
    200. A 500 means the outcome could not be recorded and the event should
    be delivered again.
    """
    try:
        record = await trigger.handle(review_id, review)
    except AuditWriteError as e:
        logger.error("Review %s not acknowledged: %s", review_id, e)
        raise HTTPException(status_code=500, detail=str(e))

    return EventOutcome(review_id=review_id, status=record.status)
