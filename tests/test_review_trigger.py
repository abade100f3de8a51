from __future__ import annotations

import asyncio

import pytest

from conftest import SEED, InMemoryStore, RecordingPushSender, build_test_trigger
from seekr.exceptions import AuditWriteError, StoreError
from seekr.models.debug_notification import DebugStatus


def _stored(store: InMemoryStore) -> list:
    """Audit records without the store-assigned timestamp."""
    return [{k: v for k, v in doc.items() if k != "timestamp"} for doc in store.records()]


def test_sends_to_hunt_owner_and_records_sent(trigger, store, sender) -> None:
    record = asyncio.run(trigger.handle("r1", {"huntId": "h1", "comment": "Loved it!"}))

    assert record.status is DebugStatus.SENT
    assert len(sender.sent) == 1
    message = sender.sent[0]
    assert message.token == "TOK"
    assert message.notification.title == "New review!"
    assert message.notification.body == "Your hunt 'City Crawl' received a new review: Loved it!"
    assert message.data == {"huntId": "h1", "reviewId": "r1"}
    assert _stored(store) == [
        {"status": "sent", "reviewId": "r1", "huntId": "h1", "ownerId": "u1", "token": "TOK"}
    ]
    assert "timestamp" in store.records()[0]


def test_missing_hunt_records_hunt_not_found(trigger, store, sender) -> None:
    record = asyncio.run(trigger.handle("r2", {"huntId": "ghost", "comment": "?"}))

    assert record.status is DebugStatus.HUNT_NOT_FOUND
    assert sender.sent == []
    assert _stored(store) == [{"status": "hunt_not_found", "reviewId": "r2", "huntId": "ghost"}]


def test_profile_without_token_records_no_token(trigger, store, sender) -> None:
    asyncio.run(trigger.handle("r3", {"huntId": "h2", "comment": "Nice views."}))

    assert sender.sent == []
    assert _stored(store) == [
        {"status": "no_token", "reviewId": "r3", "huntId": "h2", "ownerId": "u2"}
    ]


def test_missing_profile_records_no_token(trigger, store, sender) -> None:
    asyncio.run(trigger.handle("r4", {"huntId": "h3", "comment": "Tricky"}))

    assert sender.sent == []
    assert _stored(store) == [
        {"status": "no_token", "reviewId": "r4", "huntId": "h3", "ownerId": "u3"}
    ]


def test_blank_token_is_treated_as_absent() -> None:
    store = InMemoryStore(SEED)
    store.collections["hunts"]["h5"] = {"title": "Blank", "authorId": "u5"}
    sender = RecordingPushSender()
    trigger = build_test_trigger(store, sender)

    record = asyncio.run(trigger.handle("r5", {"huntId": "h5", "comment": ""}))

    assert record.status is DebugStatus.NO_TOKEN
    assert sender.sent == []


def test_hunt_without_author_skips_profile_lookup(trigger, store, sender) -> None:
    record = asyncio.run(trigger.handle("r6", {"huntId": "h4", "comment": "Hm"}))

    assert record.status is DebugStatus.NO_TOKEN
    assert record.owner_id is None
    assert ("profiles", None) not in store.reads
    assert [c for c, _ in store.reads] == ["hunts"]


def test_send_failure_is_recorded_not_raised() -> None:
    store = InMemoryStore(SEED)
    sender = RecordingPushSender(error=RuntimeError("registration-token-not-registered"))
    trigger = build_test_trigger(store, sender)

    record = asyncio.run(trigger.handle("r1", {"huntId": "h1", "comment": "Loved it!"}))

    assert record.status is DebugStatus.SEND_ERROR
    assert len(sender.sent) == 1
    assert _stored(store) == [
        {
            "status": "send_error",
            "reviewId": "r1",
            "huntId": "h1",
            "ownerId": "u1",
            "error": "registration-token-not-registered",
        }
    ]


def test_send_failure_without_message_records_exception_name() -> None:
    store = InMemoryStore(SEED)
    trigger = build_test_trigger(store, RecordingPushSender(error=TimeoutError()))

    record = asyncio.run(trigger.handle("r1", {"huntId": "h1", "comment": "Loved it!"}))

    assert record.error == "TimeoutError"


@pytest.mark.parametrize("payload", [None, {}])
def test_missing_payload_records_missing_review(trigger, store, sender, payload) -> None:
    record = asyncio.run(trigger.handle("r7", payload))

    assert record.status is DebugStatus.MISSING_REVIEW
    assert store.reads == []
    assert sender.sent == []
    assert _stored(store) == [{"status": "missing_review", "reviewId": "r7"}]


def test_unreadable_payload_records_missing_review(trigger, store, sender) -> None:
    record = asyncio.run(trigger.handle("r8", {"huntId": ["h1"], "comment": "x"}))

    assert record.status is DebugStatus.MISSING_REVIEW
    assert record.error
    assert sender.sent == []


def test_review_without_hunt_id_records_hunt_not_found(trigger, store, sender) -> None:
    record = asyncio.run(trigger.handle("r9", {"comment": "orphan"}))

    assert record.status is DebugStatus.HUNT_NOT_FOUND
    assert store.reads == []
    assert _stored(store) == [{"status": "hunt_not_found", "reviewId": "r9"}]


def test_hunt_read_failure_counts_as_not_found() -> None:
    store = InMemoryStore(SEED)
    store.read_failures["hunts"] = StoreError("connection reset")
    sender = RecordingPushSender()
    trigger = build_test_trigger(store, sender)

    record = asyncio.run(trigger.handle("r1", {"huntId": "h1", "comment": "Loved it!"}))

    assert record.status is DebugStatus.HUNT_NOT_FOUND
    assert record.error == "connection reset"
    assert sender.sent == []


def test_profile_read_failure_counts_as_no_token() -> None:
    store = InMemoryStore(SEED)
    store.read_failures["profiles"] = StoreError("permission denied")
    sender = RecordingPushSender()
    trigger = build_test_trigger(store, sender)

    record = asyncio.run(trigger.handle("r1", {"huntId": "h1", "comment": "Loved it!"}))

    assert record.status is DebugStatus.NO_TOKEN
    assert record.owner_id == "u1"
    assert record.error == "permission denied"
    assert sender.sent == []


def test_redelivery_sends_and_records_twice(trigger, store, sender) -> None:
    payload = {"huntId": "h1", "comment": "Loved it!"}

    async def deliver_twice():
        await trigger.handle("r1", payload)
        await trigger.handle("r1", payload)

    asyncio.run(deliver_twice())

    assert len(sender.sent) == 2
    assert [doc["status"] for doc in store.records()] == ["sent", "sent"]


def test_audit_write_failure_propagates_after_send() -> None:
    store = InMemoryStore(SEED)
    store.write_failures["debug_notifications"] = StoreError("index read-only")
    sender = RecordingPushSender()
    trigger = build_test_trigger(store, sender)

    with pytest.raises(AuditWriteError) as excinfo:
        asyncio.run(trigger.handle("r1", {"huntId": "h1", "comment": "Loved it!"}))

    assert excinfo.value.status == "sent"
    assert excinfo.value.review_id == "r1"
    assert len(sender.sent) == 1


def test_concurrent_runs_are_capped() -> None:
    store = InMemoryStore(SEED)
    sender = RecordingPushSender(delay=0.01)

    async def deliver_many():
        trigger = build_test_trigger(store, sender, max_instances=3)
        return await asyncio.gather(
            *(trigger.handle(f"r{i}", {"huntId": "h1", "comment": str(i)}) for i in range(10))
        )

    records = asyncio.run(deliver_many())

    assert len(records) == 10
    assert len(sender.sent) == 10
    assert sender.peak_in_flight == 3
    assert len(store.records()) == 10


def test_max_instances_must_be_positive(store, sender) -> None:
    with pytest.raises(ValueError):
        build_test_trigger(store, sender, max_instances=0)


@pytest.mark.parametrize(
    "hunt, profile, expected",
    [
        ({"title": "City Crawl", "authorId": 42}, None, DebugStatus.HUNT_NOT_FOUND),
        ({"title": "City Crawl", "authorId": "u9"}, {"author": "crawler"}, DebugStatus.NO_TOKEN),
        ({"title": "City Crawl", "authorId": "u9"}, {"author": {"fcmToken": 12345}}, DebugStatus.NO_TOKEN),
    ],
)
def test_malformed_documents_still_record_one_outcome(hunt, profile, expected) -> None:
    store = InMemoryStore(SEED)
    store.collections["hunts"]["bad"] = hunt
    if profile is not None:
        store.collections["profiles"]["u9"] = profile
    sender = RecordingPushSender()
    trigger = build_test_trigger(store, sender)

    record = asyncio.run(trigger.handle("r1", {"huntId": "bad", "comment": "Loved it!"}))

    assert record.status is expected
    assert record.error
    assert sender.sent == []
    assert len(store.records()) == 1


def test_null_hunt_title_still_sends() -> None:
    store = InMemoryStore(SEED)
    store.collections["hunts"]["h1"]["title"] = None
    sender = RecordingPushSender()
    trigger = build_test_trigger(store, sender)

    record = asyncio.run(trigger.handle("r1", {"huntId": "h1", "comment": "Loved it!"}))

    assert record.status is DebugStatus.SENT
    assert sender.sent[0].notification.body == "Your hunt '' received a new review: Loved it!"
    assert len(store.records()) == 1


def test_null_comment_still_sends(trigger, store, sender) -> None:
    record = asyncio.run(trigger.handle("r1", {"huntId": "h1", "comment": None}))

    assert record.status is DebugStatus.SENT
    assert sender.sent[0].notification.body == "Your hunt 'City Crawl' received a new review: "
    assert len(store.records()) == 1
