"""Review notification trigger.

Runs once per newly created review, in a strict order:
1) Parse the review payload (missing payload ends the run)
2) Resolve the hunt, then its owner's push token
3) Send one push message to the owner
4) Append exactly one debug record describing the terminal outcome

Runs for different reviews may overlap, up to ``max_instances`` at a time.
Nothing is deduplicated: delivering the same review twice produces two
records and, when both reach step 3, two pushes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from seekr.models.debug_notification import DebugNotificationRecord, DebugStatus
from seekr.models.push import PushMessage
from seekr.models.review import Review
from seekr.services.debug_log import DebugLogger
from seekr.services.dispatcher import NotificationDispatcher, Sent, describe_error
from seekr.services.resolver import HuntNotFound, NoToken, OwnerResolver

logger = logging.getLogger(__name__)

DEFAULT_MAX_INSTANCES = 10


class ReviewNotificationTrigger:
    """Orchestrates resolution, dispatch, and audit logging for one review."""

    def __init__(
        self,
        resolver: OwnerResolver,
        dispatcher: NotificationDispatcher,
        debug_logger: DebugLogger,
        max_instances: int = DEFAULT_MAX_INSTANCES,
    ) -> None:
        if max_instances < 1:
            raise ValueError("max_instances must be at least 1")
        self._resolver = resolver
        self._dispatcher = dispatcher
        self._debug = debug_logger
        self._max_instances = max_instances
        self._slots = asyncio.Semaphore(max_instances)

    @property
    def max_instances(self) -> int:
        return self._max_instances

    async def handle(self, review_id: str, payload: Optional[Dict[str, Any]]) -> DebugNotificationRecord:
        """Process one created review and return the recorded outcome.

        Waits for a free slot when ``max_instances`` runs are in flight.

        Raises:
            AuditWriteError: the outcome could not be recorded.
        """
        async with self._slots:
            record = await self._run(review_id, payload)
            await self._debug.record(record)
            return record

    async def _run(self, review_id: str, payload: Optional[Dict[str, Any]]) -> DebugNotificationRecord:
        if not payload:
            logger.info("Missing review payload for %s", review_id)
            return DebugNotificationRecord(status=DebugStatus.MISSING_REVIEW, review_id=review_id)

        try:
            review = Review.model_validate(payload)
        except ValidationError as e:
            logger.warning("Unreadable review payload for %s: %s", review_id, e)
            return DebugNotificationRecord(
                status=DebugStatus.MISSING_REVIEW,
                review_id=review_id,
                error=describe_error(e),
            )

        hunt_id = review.hunt_id or None
        logger.info("New review created: %s for hunt: %s", review_id, hunt_id)

        resolution = await self._resolver.resolve(hunt_id)

        if isinstance(resolution, HuntNotFound):
            logger.info("Hunt not found: %s", hunt_id)
            return DebugNotificationRecord(
                status=DebugStatus.HUNT_NOT_FOUND,
                review_id=review_id,
                hunt_id=hunt_id,
                error=resolution.error,
            )

        if isinstance(resolution, NoToken):
            logger.info("No FCM token for user: %s", resolution.owner_id)
            return DebugNotificationRecord(
                status=DebugStatus.NO_TOKEN,
                review_id=review_id,
                hunt_id=hunt_id,
                owner_id=resolution.owner_id,
                error=resolution.error,
            )

        message = PushMessage.for_review(
            token=resolution.token,
            hunt_title=resolution.hunt.title,
            comment=review.comment,
            hunt_id=hunt_id,
            review_id=review_id,
        )
        result = await self._dispatcher.dispatch(message)

        if isinstance(result, Sent):
            return DebugNotificationRecord(
                status=DebugStatus.SENT,
                review_id=review_id,
                hunt_id=hunt_id,
                owner_id=resolution.owner_id,
                token=resolution.token,
            )

        return DebugNotificationRecord(
            status=DebugStatus.SEND_ERROR,
            review_id=review_id,
            hunt_id=hunt_id,
            owner_id=resolution.owner_id,
            error=result.error,
        )
