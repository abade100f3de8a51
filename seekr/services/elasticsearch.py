"""Elasticsearch document store for the Seekr review notifier."""

from typing import Any, Dict, List, Optional

from elasticsearch import ApiError, AsyncElasticsearch, NotFoundError, TransportError

from seekr.exceptions import StoreError


def nest_field(path: str, value: Any) -> Dict[str, Any]:
    """
    Expand a dotted field path into a nested partial document.

    Example:
        >>> nest_field("author.fcmToken", "TOK")
        {'author': {'fcmToken': 'TOK'}}
    """
    doc: Dict[str, Any] = {}
    current = doc
    parts = path.split(".")
    for part in parts[:-1]:
        current[part] = {}
        current = current[part]
    current[parts[-1]] = value
    return doc


class ElasticsearchDocumentStore:
    """Document store backed by one Elasticsearch index per collection."""

    def __init__(self, client: AsyncElasticsearch, timestamp_pipeline: Optional[str] = None):
        self.client = client
        self.timestamp_pipeline = timestamp_pipeline

    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a document by ID.

        Args:
            collection: Index name
            doc_id: Document ID

        Returns:
            The document source, or None if the document or index is missing
        """
        try:
            response = await self.client.get(index=collection, id=doc_id)
        except NotFoundError:
            return None
        except (ApiError, TransportError) as e:
            raise StoreError(f"Error reading {collection}/{doc_id}: {e}") from e

        return response["_source"]

    async def add_document(self, collection: str, data: Dict[str, Any]) -> str:
        """
        Append a document with an auto-generated ID.

        The timestamp ingest pipeline stamps ``timestamp`` with the node's
        ingest time, so the clock is the cluster's, not this process's.

        Args:
            collection: Index name
            data: Document fields

        Returns:
            The generated document ID
        """
        kwargs = {}
        if self.timestamp_pipeline:
            kwargs["pipeline"] = self.timestamp_pipeline

        try:
            response = await self.client.index(index=collection, document=data, **kwargs)
        except (ApiError, TransportError) as e:
            raise StoreError(f"Error appending to {collection}: {e}") from e

        return response["_id"]

    async def set_field(self, collection: str, doc_id: str, path: str, value: Any) -> None:
        """
        Set a (possibly dotted) field on a document, creating it if missing.

        Args:
            collection: Index name
            doc_id: Document ID
            path: Field path, e.g. ``author.fcmToken``
            value: New value
        """
        try:
            await self.client.update(
                index=collection,
                id=doc_id,
                doc=nest_field(path, value),
                doc_as_upsert=True,
            )
        except (ApiError, TransportError) as e:
            raise StoreError(f"Error updating {collection}/{doc_id}: {e}") from e

    async def query_documents(
        self,
        collection: str,
        filters: Dict[str, Any],
        limit: int,
    ) -> List[Dict[str, Any]]:
        """
        Search documents by exact field values, newest first.

        Args:
            collection: Index name
            filters: Field/value pairs that must all match
            limit: Maximum number of documents

        Returns:
            Matching document sources; empty if the index does not exist
        """
        if filters:
            query = {"bool": {"filter": [{"term": {field: value}} for field, value in filters.items()]}}
        else:
            query = {"match_all": {}}

        try:
            response = await self.client.search(
                index=collection,
                query=query,
                size=limit,
                sort=[{"timestamp": {"order": "desc", "unmapped_type": "date"}}],
            )
        except NotFoundError:
            return []
        except (ApiError, TransportError) as e:
            raise StoreError(f"Error searching {collection}: {e}") from e

        return [hit["_source"] for hit in response["hits"]["hits"]]
