"""Push senders for the Seekr review notifier."""

import asyncio
import logging
import uuid
from typing import Optional

import firebase_admin
from firebase_admin import messaging

from seekr.models.push import PushMessage

logger = logging.getLogger(__name__)


def to_firebase_message(message: PushMessage) -> messaging.Message:
    """Convert a PushMessage to the Admin SDK's message type."""
    return messaging.Message(
        token=message.token,
        notification=messaging.Notification(
            title=message.notification.title,
            body=message.notification.body,
        ),
        data=dict(message.data),
    )


class FirebasePushSender:
    """Sends push messages through Firebase Cloud Messaging."""

    def __init__(self, app: Optional[firebase_admin.App] = None, dry_run: bool = False):
        self.app = app
        self.dry_run = dry_run

    async def send(self, message: PushMessage) -> str:
        """Send one message; errors from the Admin SDK propagate to the caller."""
        # messaging.send is blocking, keep it off the event loop
        return await asyncio.to_thread(
            messaging.send,
            to_firebase_message(message),
            self.dry_run,
            self.app,
        )


class LoggingPushSender:
    """Push sender for local runs: logs the message instead of sending it."""

    async def send(self, message: PushMessage) -> str:
        message_id = f"local-{uuid.uuid4().hex[:12]}"
        logger.info(
            "Push (not sent) %s to token_prefix=%s: %s | %s",
            message_id,
            message.token[:8],
            message.notification.title,
            message.notification.body,
        )
        return message_id
