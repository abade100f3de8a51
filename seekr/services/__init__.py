"""Services for the Seekr review notifier."""

from seekr.services.debug_log import DebugLogger
from seekr.services.dispatcher import NotificationDispatcher, SendFailed, Sent
from seekr.services.elasticsearch import ElasticsearchDocumentStore
from seekr.services.messaging import FirebasePushSender, LoggingPushSender
from seekr.services.ports import DocumentStore, PushSender
from seekr.services.resolver import HuntNotFound, NoToken, OwnerFound, OwnerResolver
from seekr.services.review_trigger import ReviewNotificationTrigger

__all__ = [
    "DebugLogger",
    "DocumentStore",
    "ElasticsearchDocumentStore",
    "FirebasePushSender",
    "HuntNotFound",
    "LoggingPushSender",
    "NoToken",
    "NotificationDispatcher",
    "OwnerFound",
    "OwnerResolver",
    "PushSender",
    "ReviewNotificationTrigger",
    "SendFailed",
    "Sent",
]
