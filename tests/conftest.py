"""Shared fakes for the notifier tests."""

from __future__ import annotations

import asyncio
import copy
import itertools
from typing import Any, Dict, List, Optional

import pytest

from seekr.config import Settings
from seekr.models.push import PushMessage
from seekr.services.debug_log import DebugLogger
from seekr.services.dispatcher import NotificationDispatcher
from seekr.services.elasticsearch import nest_field
from seekr.services.resolver import OwnerResolver
from seekr.services.review_trigger import ReviewNotificationTrigger


class InMemoryStore:
    """Dict-backed DocumentStore with per-collection failure injection."""

    def __init__(self, collections: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None) -> None:
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = copy.deepcopy(collections or {})
        self.read_failures: Dict[str, Exception] = {}
        self.write_failures: Dict[str, Exception] = {}
        self.reads: List[tuple] = []
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)

    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        self.reads.append((collection, doc_id))
        if collection in self.read_failures:
            raise self.read_failures[collection]
        doc = self.collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def add_document(self, collection: str, data: Dict[str, Any]) -> str:
        if collection in self.write_failures:
            raise self.write_failures[collection]
        doc_id = f"auto-{next(self._ids)}"
        # Monotonic stand-in for a server timestamp
        stamped = {**data, "timestamp": f"2024-01-01T00:00:{next(self._clock):02d}Z"}
        self.collections.setdefault(collection, {})[doc_id] = stamped
        return doc_id

    async def set_field(self, collection: str, doc_id: str, path: str, value: Any) -> None:
        if collection in self.write_failures:
            raise self.write_failures[collection]
        doc = self.collections.setdefault(collection, {}).setdefault(doc_id, {})
        _merge(doc, nest_field(path, value))

    async def query_documents(
        self,
        collection: str,
        filters: Dict[str, Any],
        limit: int,
    ) -> List[Dict[str, Any]]:
        if collection in self.read_failures:
            raise self.read_failures[collection]
        docs = [
            doc for doc in self.collections.get(collection, {}).values()
            if all(doc.get(field) == value for field, value in filters.items())
        ]
        docs.sort(key=lambda doc: doc.get("timestamp", ""), reverse=True)
        return copy.deepcopy(docs[:limit])

    def records(self, collection: str = "debug_notifications") -> List[Dict[str, Any]]:
        """Stored documents in append order."""
        return list(self.collections.get(collection, {}).values())


def _merge(target: Dict[str, Any], patch: Dict[str, Any]) -> None:
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value


class RecordingPushSender:
    """PushSender that records messages and optionally fails or blocks."""

    def __init__(self, error: Optional[Exception] = None, delay: float = 0.0) -> None:
        self.error = error
        self.delay = delay
        self.sent: List[PushMessage] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    async def send(self, message: PushMessage) -> str:
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            self.sent.append(message)
            if self.error is not None:
                raise self.error
            return f"msg-{len(self.sent)}"
        finally:
            self.in_flight -= 1


SEED = {
    "hunts": {
        "h1": {"title": "City Crawl", "authorId": "u1"},
        "h2": {"title": "Lakeside Loop", "authorId": "u2"},
        "h3": {"title": "Old Town Riddles", "authorId": "u3"},
        "h4": {"title": "Ownerless"},
    },
    "profiles": {
        "u1": {"author": {"pseudonym": "crawler", "fcmToken": "TOK"}},
        "u2": {"author": {"pseudonym": "lakey"}},
        "u5": {"author": {"fcmToken": ""}},
    },
}


def build_test_trigger(
    store: InMemoryStore,
    sender: RecordingPushSender,
    max_instances: int = 10,
) -> ReviewNotificationTrigger:
    return ReviewNotificationTrigger(
        resolver=OwnerResolver(store, hunts_collection="hunts", profiles_collection="profiles"),
        dispatcher=NotificationDispatcher(sender),
        debug_logger=DebugLogger(store, "debug_notifications"),
        max_instances=max_instances,
    )


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore(SEED)


@pytest.fixture()
def sender() -> RecordingPushSender:
    return RecordingPushSender()


@pytest.fixture()
def trigger(store: InMemoryStore, sender: RecordingPushSender) -> ReviewNotificationTrigger:
    return build_test_trigger(store, sender)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        store_backend="elasticsearch",
        push_backend="log",
        hunts_collection="hunts",
        profiles_collection="profiles",
        reviews_collection="hunts_reviews",
        debug_collection="debug_notifications",
    )

