#!/usr/bin/env python3
"""
Run the review notification pipeline for an existing review.

Reads the review from the reviews collection and delivers it to the
trigger exactly as a new-review event would, so every run appends one
debug record and may send one push. Running it twice for the same review
sends twice.
"""

import asyncio
import sys
from pathlib import Path

# Allow running as script or module
if __name__ == "__main__" and __package__ is None:
    sys.path.insert(0, str(Path(__file__).parent.parent))

import click

from admin.utils.cli import (
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    settings_options,
)
from seekr.config import Settings, configure_logging
from seekr.dependencies import close_services, get_store, init_services
from seekr.exceptions import AuditWriteError, StoreError
from seekr.models.debug_notification import DebugNotificationRecord, DebugStatus


async def dispatch(review_id: str, settings: Settings) -> DebugNotificationRecord:
    """Load the review and run one trigger invocation for it."""
    trigger = await init_services(settings)
    try:
        store = await get_store()
        payload = await store.get_document(settings.reviews_collection, review_id)
        return await trigger.handle(review_id, payload)
    finally:
        await close_services()


@click.command()
@click.argument("review_id")
@settings_options
def main(review_id: str, settings: Settings):
    """
    Deliver REVIEW_ID to the notification pipeline.

    Examples:

        python -m admin.dispatch_review r1
    """
    configure_logging(settings)

    try:
        record = asyncio.run(dispatch(review_id, settings))
    except AuditWriteError as e:
        echo_error(f"Outcome not recorded: {e}")
        raise SystemExit(1)
    except StoreError as e:
        echo_error(f"Could not read review {review_id}: {e}")
        raise SystemExit(1)

    summary = ", ".join(
        f"{key}={value}" for key, value in record.to_document().items() if key != "status"
    )
    if record.status == DebugStatus.SENT:
        echo_success(f"sent: {summary}")
    elif record.status == DebugStatus.SEND_ERROR:
        echo_error(f"send_error: {summary}")
        raise SystemExit(1)
    else:
        echo_warning(f"{record.status.value}: {summary}")
        echo_info("No notification was sent.")


if __name__ == "__main__":
    main()
