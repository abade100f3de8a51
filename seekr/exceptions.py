"""Exceptions raised by the Seekr review notifier."""

from typing import Optional


class SeekrError(Exception):
    """Base class for notifier errors."""


class StoreError(SeekrError):
    """A document store call failed for a reason other than absence."""


class AuditWriteError(SeekrError):
    """Appending the debug notification record failed.

    The invocation is reported as failed so that the delivering system
    can redeliver the event.
    """

    def __init__(self, status: str, review_id: str, cause: Optional[BaseException] = None):
        self.status = status
        self.review_id = review_id
        self.cause = cause
        super().__init__(f"Could not record '{status}' outcome for review {review_id}: {cause}")
