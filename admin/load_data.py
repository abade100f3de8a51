#!/usr/bin/env python3
"""
Bulk load fixture data into Elasticsearch for the Seekr notifier.

Loads hunts, profiles, and reviews from NDJSON files into their indices
using the bulk API. Each line carries its document ID under ``_id``; the
remaining fields become the document.
"""

import json
import sys
from pathlib import Path
from typing import Iterator, Optional

# Allow running as script or module
if __name__ == "__main__" and __package__ is None:
    sys.path.insert(0, str(Path(__file__).parent.parent))

import click
from tqdm import tqdm

from admin.utils.cli import (
    common_options,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    settings_options,
)
from admin.utils.elasticsearch import connect
from seekr.config import Settings


# Default paths relative to project root
PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_DATA_DIR = PROJECT_ROOT / "data" / "fixtures"

DATA_TYPES = ["hunts", "profiles", "reviews"]

# Default batch size
DEFAULT_BATCH_SIZE = 500


def count_lines(file_path: Path) -> int:
    """Count lines in a file efficiently."""
    count = 0
    with open(file_path, "rb") as f:
        for _ in f:
            count += 1
    return count


def read_ndjson_batches(file_path: Path, batch_size: int) -> Iterator[list[dict]]:
    """
    Read an NDJSON file in batches, skipping blank and malformed lines.

    Args:
        file_path: Path to NDJSON file
        batch_size: Number of documents per batch

    Yields:
        Lists of parsed documents
    """
    batch = []

    with open(file_path, "r") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                batch.append(json.loads(line))
            except json.JSONDecodeError:
                continue

            if len(batch) >= batch_size:
                yield batch
                batch = []

    # Yield remaining documents
    if batch:
        yield batch


def build_bulk_body(index_name: str, documents: list[dict]) -> list[dict]:
    """
    Build bulk index actions, taking each document's ID from ``_id``.

    Documents without an ``_id`` get an ID generated by Elasticsearch.
    """
    bulk_body = []
    for doc in documents:
        source = dict(doc)
        action = {"_index": index_name}
        doc_id = source.pop("_id", None)
        if doc_id:
            action["_id"] = doc_id
        bulk_body.append({"index": action})
        bulk_body.append(source)
    return bulk_body


def bulk_index(
    es,
    index_name: str,
    documents: list[dict],
    dry_run: bool = False,
    verbose: bool = False
) -> tuple[int, int]:
    """
    Bulk index documents into Elasticsearch.

    Args:
        es: Elasticsearch client
        index_name: Target index name
        documents: List of documents to index
        dry_run: If True, don't actually index
        verbose: If True, print detailed output

    Returns:
        Tuple of (success_count, error_count)
    """
    if dry_run:
        return len(documents), 0

    bulk_body = build_bulk_body(index_name, documents)
    if not bulk_body:
        return 0, 0

    try:
        response = es.bulk(operations=bulk_body, refresh=False)
    except Exception as e:
        echo_error(f"Bulk indexing error: {e}")
        return 0, len(documents)

    success_count = 0
    error_count = 0

    for item in response.get("items", []):
        if item.get("index", {}).get("error"):
            error_count += 1
            if verbose:
                echo_warning(f"Index error: {item['index']['error']}")
        else:
            success_count += 1

    return success_count, error_count


def load_data_file(
    es,
    file_path: Path,
    index_name: str,
    batch_size: int,
    dry_run: bool = False,
    verbose: bool = False
) -> tuple[int, int]:
    """
    Load a single NDJSON file into Elasticsearch.

    Returns:
        Tuple of (total_success, total_errors)
    """
    total_success = 0
    total_errors = 0

    with tqdm(total=count_lines(file_path), desc=f"Loading {index_name}", unit="doc") as pbar:
        for batch in read_ndjson_batches(file_path, batch_size):
            success, errors = bulk_index(es, index_name, batch, dry_run=dry_run, verbose=verbose)
            total_success += success
            total_errors += errors
            pbar.update(len(batch))

    return total_success, total_errors


@click.command()
@click.option(
    "--data-type", "-t",
    type=click.Choice(DATA_TYPES + ["all"]),
    default="all",
    help="Type of data to load."
)
@click.option(
    "--data-dir", "-d",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=DEFAULT_DATA_DIR,
    help="Directory holding hunts.ndjson, profiles.ndjson and reviews.ndjson."
)
@click.option(
    "--batch-size",
    type=int,
    default=DEFAULT_BATCH_SIZE,
    help=f"Number of documents per bulk request (default: {DEFAULT_BATCH_SIZE})."
)
@common_options
@settings_options
def main(
    data_type: str,
    data_dir: Path,
    batch_size: int,
    dry_run: bool,
    verbose: bool,
    settings: Settings,
):
    """
    Bulk load fixture data into Elasticsearch.

    Loading reviews while the review watcher runs triggers notifications
    for them, the same as reviews created by the app.

    Examples:

        # Load all fixtures
        python -m admin.load_data

        # Load only hunts
        python -m admin.load_data -t hunts
    """
    indices = {
        "hunts": settings.hunts_collection,
        "profiles": settings.profiles_collection,
        "reviews": settings.reviews_collection,
    }

    data_types = DATA_TYPES if data_type == "all" else [data_type]
    echo_info(f"Data types to load: {', '.join(data_types)}")

    if dry_run:
        echo_info("[DRY RUN] No data will be loaded")

    es = connect(settings, verbose)

    for dt in data_types:
        if not es.indices.exists(index=indices[dt]):
            echo_error(f"Index '{indices[dt]}' does not exist.")
            echo_error("Run create_indices.py first.")
            raise SystemExit(1)

    total_success = 0
    total_errors = 0

    for dt in data_types:
        file_path = data_dir / f"{dt}.ndjson"
        if not file_path.exists():
            echo_warning(f"{dt}: SKIPPED (file not found: {file_path})")
            continue

        success, errors = load_data_file(
            es, file_path, indices[dt], batch_size,
            dry_run=dry_run, verbose=verbose
        )
        echo_info(f"{dt}: {success:,} loaded, {errors} errors")
        total_success += success
        total_errors += errors

        if not dry_run:
            es.indices.refresh(index=indices[dt])

    echo_info(f"Total: {total_success:,} documents loaded, {total_errors} errors")

    if total_errors > 0:
        echo_warning(f"{total_errors} documents failed to load")
        raise SystemExit(1)

    echo_success("Data loading complete!")


if __name__ == "__main__":
    main()
