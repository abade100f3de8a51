"""API routers for the Seekr review notifier."""

from seekr.routers.debug_notifications import router as debug_notifications_router
from seekr.routers.events import router as events_router
from seekr.routers.profiles import router as profiles_router

__all__ = [
    "debug_notifications_router",
    "events_router",
    "profiles_router",
]
