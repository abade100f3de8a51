"""Builds and sends the new-review push message."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from seekr.models.push import PushMessage
from seekr.services.ports import PushSender

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sent:
    message: PushMessage
    message_id: str


@dataclass(frozen=True)
class SendFailed:
    message: PushMessage
    error: str


DispatchResult = Union[Sent, SendFailed]


def describe_error(exc: BaseException) -> str:
    """Non-empty text for an exception, falling back to its class name."""
    return str(exc) or type(exc).__name__


class NotificationDispatcher:
    """Sends exactly one message per call and never retries."""

    def __init__(self, sender: PushSender) -> None:
        self._sender = sender

    async def dispatch(self, message: PushMessage) -> DispatchResult:
        """Send ``message``; any fault from the provider becomes SendFailed."""
        logger.info("Sending notification to: %s", message.token)
        try:
            message_id = await self._sender.send(message)
        except Exception as e:
            logger.error("Error sending notification: %s", e, exc_info=True)
            return SendFailed(message=message, error=describe_error(e))

        logger.info("Notification sent (%s).", message_id)
        return Sent(message=message, message_id=message_id)
