"""Ports used by the notification pipeline.

The pipeline only talks to a document store and a push sender through these
contracts, so backends can be swapped (Elasticsearch, Firestore, fakes in
tests) without touching the core.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from seekr.models.push import PushMessage


class DocumentStore(Protocol):
    """Document operations required by the pipeline and operator surfaces."""

    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the document's fields, or None when it does not exist."""
        ...

    async def add_document(self, collection: str, data: Dict[str, Any]) -> str:
        """Append a document with a server-assigned ``timestamp``; return its ID."""
        ...

    async def set_field(self, collection: str, doc_id: str, path: str, value: Any) -> None:
        """Set a dotted field path on a document, creating it if needed."""
        ...

    async def query_documents(
        self,
        collection: str,
        filters: Dict[str, Any],
        limit: int,
    ) -> List[Dict[str, Any]]:
        """Return documents whose fields equal ``filters``, newest first."""
        ...


class PushSender(Protocol):
    """Push messaging operations required by the dispatcher."""

    async def send(self, message: PushMessage) -> str:
        """Send one message and return the provider's message ID."""
        ...
