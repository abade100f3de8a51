#!/usr/bin/env python3
"""
Review Watcher for the Seekr review notifier.

Polls the reviews index for newly indexed reviews and delivers each one to
the notification trigger, the way a document-created event would. Reviews
in one poll are processed concurrently, never more than ``max_instances``
at a time.

The checkpoint is the ``indexed_at`` time stamped by the reviews index's
ingest pipeline and moves past every fetched review. A review whose outcome
could not be recorded is held back and delivered again on each later poll
until its record is written; the reviews around it are not redelivered.

Usage:
    python streaming/review_watcher.py
    python streaming/review_watcher.py --since 2024-01-15T10:00:00Z
    python streaming/review_watcher.py --once
"""

import argparse
import asyncio
import logging
import signal
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from elasticsearch import AsyncElasticsearch, NotFoundError

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from seekr.config import Settings, configure_logging, get_settings
from seekr.dependencies import build_push_sender, build_trigger, create_es_client
from seekr.services.elasticsearch import ElasticsearchDocumentStore
from seekr.services.review_trigger import ReviewNotificationTrigger

logger = logging.getLogger(__name__)


class ReviewWatcher:
    """Turns newly indexed review documents into trigger invocations."""

    def __init__(
        self,
        es_client: AsyncElasticsearch,
        trigger: ReviewNotificationTrigger,
        reviews_index: str,
        since: str,
        batch_size: int = 50,
        interval: float = 2.0,
    ):
        """
        Initialize the review watcher.

        Args:
            es_client: Elasticsearch async client
            trigger: Pipeline invoked once per new review
            reviews_index: Name of the reviews index
            since: ISO timestamp; reviews indexed at or after it are delivered
            batch_size: Reviews fetched per poll
            interval: Seconds between polls when caught up
        """
        self.es_client = es_client
        self.trigger = trigger
        self.reviews_index = reviews_index
        self.checkpoint = since
        self.batch_size = batch_size
        self.interval = interval
        self._delivered_at_checkpoint: Set[str] = set()
        self._retry: Dict[str, Dict[str, Any]] = {}
        self._shutdown = False
        self._stats = {
            "reviews_delivered": 0,
            "outcomes": {},
            "failures": 0,
            "start_time": None,
        }

    def _setup_signal_handlers(self):
        """Set up graceful shutdown signal handlers."""
        def signal_handler(sig, frame):
            logger.info("Received shutdown signal. Finishing current batch...")
            self._shutdown = True

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    async def fetch_new_reviews(self) -> List[Dict[str, Any]]:
        """
        Fetch reviews indexed at or after the checkpoint, oldest first.

        Reviews already delivered at exactly the checkpoint time are dropped.

        Returns:
            List of search hits (``_id`` and ``_source``)
        """
        try:
            response = await self.es_client.search(
                index=self.reviews_index,
                query={"range": {"indexed_at": {"gte": self.checkpoint}}},
                sort=[{"indexed_at": {"order": "asc"}}],
                size=self.batch_size + len(self._delivered_at_checkpoint),
            )
        except NotFoundError:
            logger.warning(f"Reviews index {self.reviews_index} does not exist yet")
            return []

        hits = [
            hit for hit in response["hits"]["hits"]
            if hit["_id"] not in self._delivered_at_checkpoint
        ]
        return hits[: self.batch_size]

    async def _deliver(self, hit: Dict[str, Any]) -> Optional[str]:
        """Run the trigger for one hit; return the status, or None if it failed."""
        review_id = hit["_id"]
        try:
            record = await self.trigger.handle(review_id, hit.get("_source"))
        except Exception as e:
            logger.error(f"Review {review_id} not recorded, will redeliver: {e}")
            self._stats["failures"] += 1
            return None

        status = record.status.value
        self._stats["reviews_delivered"] += 1
        self._stats["outcomes"][status] = self._stats["outcomes"].get(status, 0) + 1
        return status

    def _advance(self, hits: List[Dict[str, Any]]) -> None:
        """Move the checkpoint past every fetched review."""
        for hit in hits:
            indexed_at = hit["_source"].get("indexed_at")
            if indexed_at is None:
                continue
            if indexed_at != self.checkpoint:
                self.checkpoint = indexed_at
                self._delivered_at_checkpoint = set()
            self._delivered_at_checkpoint.add(hit["_id"])

    async def poll_once(self) -> int:
        """
        Deliver one batch of new reviews.

        Returns:
            Number of new reviews fetched in this poll; held-back reviews
            delivered again are not counted
        """
        hits = await self.fetch_new_reviews()
        fresh = {hit["_id"] for hit in hits}
        batch = [hit for rid, hit in self._retry.items() if rid not in fresh] + hits
        if not batch:
            return 0

        statuses = await asyncio.gather(*(self._deliver(hit) for hit in batch))
        for hit, status in zip(batch, statuses):
            if status is None:
                self._retry[hit["_id"]] = hit
            else:
                self._retry.pop(hit["_id"], None)
        self._advance(hits)

        logger.info(
            f"[{self._stats['reviews_delivered']:>5}] "
            f"Delivered {sum(1 for s in statuses if s)} of {len(batch)} reviews | "
            f"checkpoint {self.checkpoint}"
        )
        return len(hits)

    async def run(self, once: bool = False):
        """
        Poll until shut down.

        Args:
            once: Stop after the first poll that finds nothing new
        """
        self._setup_signal_handlers()
        self._stats["start_time"] = datetime.now()

        logger.info(f"Watching {self.reviews_index} from {self.checkpoint}")
        logger.info(f"Max concurrent deliveries: {self.trigger.max_instances}")
        logger.info("Press Ctrl+C to stop")

        while not self._shutdown:
            fetched = await self.poll_once()
            if fetched >= self.batch_size:
                # Backlog: poll again right away
                continue
            if once and fetched == 0:
                break
            await asyncio.sleep(self.interval)

        self._print_summary()

    def _print_summary(self):
        """Print delivery statistics."""
        elapsed = 0.0
        if self._stats["start_time"]:
            elapsed = (datetime.now() - self._stats["start_time"]).total_seconds()

        print("=" * 60)
        print("WATCHER SUMMARY")
        print("=" * 60)
        print(f"  Reviews delivered: {self._stats['reviews_delivered']}")
        for status, count in sorted(self._stats["outcomes"].items()):
            print(f"    {status:<16} {count}")
        print(f"  Failures:          {self._stats['failures']}")
        print(f"  Elapsed:           {elapsed:.1f}s")
        print("=" * 60)


def build_watcher(
    settings: Settings,
    es_client: AsyncElasticsearch,
    since: str,
) -> ReviewWatcher:
    """Wire a watcher and its trigger to the Elasticsearch backend."""
    store = ElasticsearchDocumentStore(es_client, settings.timestamp_pipeline)
    trigger = build_trigger(store, build_push_sender(settings), settings)
    return ReviewWatcher(
        es_client=es_client,
        trigger=trigger,
        reviews_index=settings.reviews_collection,
        since=since,
        batch_size=settings.watch_batch_size,
        interval=settings.watch_interval,
    )


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Deliver newly indexed reviews to the Seekr notification pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Deliver reviews indexed from now on
  python streaming/review_watcher.py

  # Catch up from a point in time, then keep watching
  python streaming/review_watcher.py --since 2024-01-15T10:00:00Z

  # Deliver the backlog and exit
  python streaming/review_watcher.py --since 2024-01-15T10:00:00Z --once
        """
    )
    parser.add_argument(
        "--since",
        help="ISO timestamp to start from (default: now)"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Exit once no new reviews are found"
    )

    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings)

    if settings.store_backend != "elasticsearch":
        logger.error("The review watcher requires the elasticsearch store backend")
        sys.exit(1)

    since = args.since or datetime.now(timezone.utc).isoformat()

    logger.info("Connecting to Elasticsearch...")
    es_client = create_es_client(settings)

    try:
        info = await es_client.info()
        logger.info(f"Connected to Elasticsearch {info['version']['number']}")
    except Exception as e:
        logger.error(f"Failed to connect to Elasticsearch: {e}")
        logger.error("Check ELASTICSEARCH_URL and ELASTICSEARCH_API_KEY environment variables")
        await es_client.close()
        sys.exit(1)

    watcher = build_watcher(settings, es_client, since)

    try:
        await watcher.run(once=args.once)
    finally:
        await es_client.close()
        logger.info("Elasticsearch connection closed")


if __name__ == "__main__":
    asyncio.run(main())
