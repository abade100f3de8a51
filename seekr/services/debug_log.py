"""Append-only audit log of pipeline outcomes."""

from __future__ import annotations

import logging

from seekr.exceptions import AuditWriteError
from seekr.models.debug_notification import DebugNotificationRecord
from seekr.services.ports import DocumentStore

logger = logging.getLogger(__name__)


class DebugLogger:
    """Writes one DebugNotificationRecord per pipeline run."""

    def __init__(self, store: DocumentStore, collection: str) -> None:
        self._store = store
        self._collection = collection

    async def record(self, record: DebugNotificationRecord) -> str:
        """Append ``record``; the store stamps the timestamp.

        Raises:
            AuditWriteError: the append failed. Not swallowed, so the run is
                reported as failed to whoever delivered the event.
        """
        try:
            doc_id = await self._store.add_document(self._collection, record.to_document())
        except Exception as e:
            raise AuditWriteError(record.status.value, record.review_id, e) from e

        logger.debug("Recorded %s for review %s as %s", record.status.value, record.review_id, doc_id)
        return doc_id
