"""Firestore document store for the Seekr review notifier."""

from typing import Any, Dict, List, Optional

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from seekr.exceptions import StoreError
from seekr.services.elasticsearch import nest_field


class FirestoreDocumentStore:
    """Document store backed by Firestore collections."""

    def __init__(self, client: firestore.AsyncClient):
        self.client = client

    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            snapshot = await self.client.collection(collection).document(doc_id).get()
        except GoogleAPICallError as e:
            raise StoreError(f"Error reading {collection}/{doc_id}: {e}") from e

        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    async def add_document(self, collection: str, data: Dict[str, Any]) -> str:
        """Append ``data`` with a Firestore server timestamp."""
        try:
            _, ref = await self.client.collection(collection).add(
                {**data, "timestamp": firestore.SERVER_TIMESTAMP}
            )
        except GoogleAPICallError as e:
            raise StoreError(f"Error appending to {collection}: {e}") from e

        return ref.id

    async def set_field(self, collection: str, doc_id: str, path: str, value: Any) -> None:
        # merge=True keeps sibling fields of the nested map
        try:
            await self.client.collection(collection).document(doc_id).set(
                nest_field(path, value), merge=True
            )
        except GoogleAPICallError as e:
            raise StoreError(f"Error updating {collection}/{doc_id}: {e}") from e

    async def query_documents(
        self,
        collection: str,
        filters: Dict[str, Any],
        limit: int,
    ) -> List[Dict[str, Any]]:
        query = self.client.collection(collection)
        for field, value in filters.items():
            query = query.where(filter=FieldFilter(field, "==", value))
        query = query.order_by("timestamp", direction=firestore.Query.DESCENDING).limit(limit)

        try:
            return [snapshot.to_dict() async for snapshot in query.stream()]
        except GoogleAPICallError as e:
            raise StoreError(f"Error querying {collection}: {e}") from e
