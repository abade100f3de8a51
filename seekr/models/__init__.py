"""Pydantic models for the Seekr review notifier."""

from seekr.models.debug_notification import DebugNotificationList, DebugNotificationRecord, DebugStatus
from seekr.models.hunt import Author, Hunt, Profile, TokenRegistration
from seekr.models.push import NEW_REVIEW_TITLE, PushMessage, PushNotification
from seekr.models.review import Review

__all__ = [
    "Author",
    "DebugNotificationList",
    "DebugNotificationRecord",
    "DebugStatus",
    "Hunt",
    "NEW_REVIEW_TITLE",
    "Profile",
    "PushMessage",
    "PushNotification",
    "Review",
    "TokenRegistration",
]
