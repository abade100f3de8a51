#!/usr/bin/env python3
"""
Create Elasticsearch indices and ingest pipelines for the Seekr notifier.

Reads mapping definitions from the mappings/ directory and creates
indices with the specified settings and mappings. The ingest pipelines
stamp server-side times: ``timestamp`` on debug notification records and
``indexed_at`` on reviews (which the review watcher polls on).
"""

import json
import sys
from pathlib import Path

# Allow running as script or module
if __name__ == "__main__" and __package__ is None:
    sys.path.insert(0, str(Path(__file__).parent.parent))

import click

from admin.utils.cli import (
    common_options,
    echo_error,
    echo_info,
    echo_success,
    echo_verbose,
    echo_warning,
    settings_options,
)
from admin.utils.elasticsearch import connect
from seekr.config import Settings


# Default mappings directory relative to project root
DEFAULT_MAPPINGS_DIR = Path(__file__).parent.parent / "mappings"

REVIEW_INDEXED_AT_PIPELINE = "seekr-review-indexed-at"


def build_pipelines(timestamp_pipeline: str) -> dict:
    """
    Ingest pipeline definitions keyed by pipeline ID.

    Args:
        timestamp_pipeline: ID used by the notifier when appending records

    Returns:
        dict: Pipeline ID -> pipeline body
    """
    return {
        timestamp_pipeline: {
            "description": "Stamp appended documents with the ingest time",
            "processors": [
                {"set": {"field": "timestamp", "value": "{{{_ingest.timestamp}}}"}}
            ],
        },
        REVIEW_INDEXED_AT_PIPELINE: {
            "description": "Record when a review document was indexed",
            "processors": [
                {"set": {"field": "indexed_at", "value": "{{{_ingest.timestamp}}}"}}
            ],
        },
    }


def load_mapping(mapping_path: Path) -> dict:
    """
    Load a mapping definition from a JSON file.

    Args:
        mapping_path: Path to the mapping JSON file

    Returns:
        dict: The mapping definition including settings and mappings
    """
    with open(mapping_path, "r") as f:
        return json.load(f)


def get_index_name_from_path(mapping_path: Path) -> str:
    """
    Extract index name from mapping file path.

    Args:
        mapping_path: Path to mapping file (e.g., mappings/hunts.json)

    Returns:
        str: Index name (e.g., "hunts")
    """
    return mapping_path.stem


def put_pipeline(es, pipeline_id: str, body: dict, dry_run: bool = False) -> bool:
    """
    Create or replace an ingest pipeline.

    Args:
        es: Elasticsearch client
        pipeline_id: Pipeline ID
        body: Pipeline description and processors
        dry_run: If True, only simulate the action

    Returns:
        bool: True if successful, False otherwise
    """
    try:
        if dry_run:
            echo_info(f"[DRY RUN] Would put pipeline: {pipeline_id}")
            return True

        es.ingest.put_pipeline(
            id=pipeline_id,
            description=body["description"],
            processors=body["processors"],
        )
        echo_success(f"Pipeline ready: {pipeline_id}")
        return True

    except Exception as e:
        echo_error(f"Failed to put pipeline {pipeline_id}: {e}")
        return False


def create_index(
    es,
    index_name: str,
    mapping: dict,
    dry_run: bool = False,
    verbose: bool = False
) -> bool:
    """
    Create an Elasticsearch index with the given mapping.

    Args:
        es: Elasticsearch client
        index_name: Name of the index to create
        mapping: Index mapping definition
        dry_run: If True, only simulate the action
        verbose: If True, print detailed output

    Returns:
        bool: True if successful, False otherwise
    """
    try:
        if dry_run:
            echo_info(f"[DRY RUN] Would create index: {index_name}")
            echo_verbose(f"Mapping: {json.dumps(mapping, indent=2)}", verbose)
            return True

        es.indices.create(
            index=index_name,
            settings=mapping.get("settings", {}),
            mappings=mapping.get("mappings", {})
        )

        echo_success(f"Created index: {index_name}")
        return True

    except Exception as e:
        echo_error(f"Failed to create index {index_name}: {e}")
        return False


def delete_index(es, index_name: str, dry_run: bool = False) -> bool:
    """
    Delete an Elasticsearch index.

    Args:
        es: Elasticsearch client
        index_name: Name of the index to delete
        dry_run: If True, only simulate the action

    Returns:
        bool: True if successful, False otherwise
    """
    try:
        if dry_run:
            echo_info(f"[DRY RUN] Would delete index: {index_name}")
            return True

        es.indices.delete(index=index_name)
        echo_success(f"Deleted index: {index_name}")
        return True

    except Exception as e:
        echo_error(f"Failed to delete index {index_name}: {e}")
        return False


@click.command()
@click.option(
    "--mappings-dir", "-m",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=DEFAULT_MAPPINGS_DIR,
    help="Directory containing mapping JSON files."
)
@click.option(
    "--index", "-i",
    multiple=True,
    help="Specific index to create (can be specified multiple times). "
         "If not provided, creates all indices found in mappings directory."
)
@click.option(
    "--delete-existing",
    is_flag=True,
    default=False,
    help="Delete existing indices before creating new ones."
)
@click.option(
    "--force", "-f",
    is_flag=True,
    default=False,
    help="Skip confirmation prompts."
)
@common_options
@settings_options
def main(
    mappings_dir: Path,
    index: tuple,
    delete_existing: bool,
    force: bool,
    dry_run: bool,
    verbose: bool,
    settings: Settings,
):
    """
    Create ingest pipelines and indices from mapping definitions.

    Pipelines are created first because the reviews index names one as its
    default pipeline.

    Examples:

        # Create everything
        python -m admin.create_indices

        # Create specific indices
        python -m admin.create_indices -i hunts -i profiles

        # Preview what would be created
        python -m admin.create_indices --dry-run
    """
    mapping_files = sorted(mappings_dir.glob("*.json"))

    if not mapping_files:
        echo_error(f"No mapping files found in {mappings_dir}")
        raise SystemExit(1)

    # Filter to specific indices if requested
    if index:
        mapping_files = [
            f for f in mapping_files
            if get_index_name_from_path(f) in index
        ]
        if not mapping_files:
            echo_error(f"No mapping files found for indices: {', '.join(index)}")
            raise SystemExit(1)

    echo_info(f"Found {len(mapping_files)} mapping file(s)")

    es = connect(settings, verbose)

    fail_count = 0
    for pipeline_id, body in build_pipelines(settings.timestamp_pipeline).items():
        if not put_pipeline(es, pipeline_id, body, dry_run=dry_run):
            fail_count += 1

    # Check which indices already exist
    existing_indices = [
        get_index_name_from_path(f) for f in mapping_files
        if es.indices.exists(index=get_index_name_from_path(f))
    ]

    if existing_indices and not delete_existing:
        echo_warning(f"The following indices already exist: {', '.join(existing_indices)}")
        echo_info("Use --delete-existing to recreate them, or they will be skipped.")

    if delete_existing and existing_indices:
        if not dry_run and not force:
            if not click.confirm(
                f"Delete {len(existing_indices)} existing indices? This cannot be undone.",
                default=False,
                abort=False
            ):
                echo_info("Aborted.")
                raise SystemExit(0)

        for index_name in existing_indices:
            delete_index(es, index_name, dry_run=dry_run)

    success_count = 0
    skip_count = 0

    for mapping_file in mapping_files:
        index_name = get_index_name_from_path(mapping_file)

        if index_name in existing_indices and not delete_existing:
            echo_info(f"Skipping existing index: {index_name}")
            skip_count += 1
            continue

        try:
            mapping = load_mapping(mapping_file)
            echo_verbose(f"Loaded mapping from {mapping_file}", verbose)
        except Exception as e:
            echo_error(f"Failed to load mapping from {mapping_file}: {e}")
            fail_count += 1
            continue

        if create_index(es, index_name, mapping, dry_run=dry_run, verbose=verbose):
            success_count += 1
        else:
            fail_count += 1

    echo_info(f"\nSummary: {success_count} created, {skip_count} skipped, {fail_count} failed")

    if fail_count > 0:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
