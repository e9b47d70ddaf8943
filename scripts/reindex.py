#!/usr/bin/env python
"""Rebuild the meeting vector index from a system-of-record export.

Usage:
    python -m scripts.reindex --records data/meetings.json
    python -m scripts.reindex --records data/meetings.jsonl --recreate

Run offline, not on the request path. Use ``--recreate`` after changing
the embedding model: vectors of a different dimensionality cannot share a
collection.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from meeting_search.config import get_settings
from meeting_search.context import SearchContext
from meeting_search.documents.sources import JSONFileRecordSource
from meeting_search.exceptions import MeetingSearchError
from meeting_search.indexing.models import ReindexReport
from meeting_search.logging_config import get_logger, setup_logging
from meeting_search.vectorstore.service import QdrantVectorStore

logger = get_logger(__name__)


async def prepare_collection(context: SearchContext, recreate: bool) -> None:
    """Make sure the collection exists, dropping it first if asked to."""
    store = context.vector_store
    if not isinstance(store, QdrantVectorStore):
        return

    exists = await store.collection_exists()
    if exists and recreate:
        logger.info(f"Dropping collection {store.collection}")
        await store.delete_collection()
        exists = False

    if not exists:
        dimensions = await context.embedding_service.get_dimensions()
        await store.create_collection(dimensions)


async def run_reindex(
    records_path: Path,
    recreate: bool = False,
    output_path: Path | None = None,
) -> ReindexReport:
    """Index every eligible record from ``records_path``.

    Args:
        records_path: JSON array or JSON Lines export of meeting records.
        recreate: Drop and recreate the collection before indexing.
        output_path: Optional path to write the report as JSON.

    Returns:
        The reindex report.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level)

    source = JSONFileRecordSource(records_path)
    context = SearchContext.from_settings(settings)
    try:
        await context.vector_store.connect()
        await prepare_collection(context, recreate)
        report = await context.indexer.reindex_all(source)
    finally:
        await context.close()

    print("\n" + "=" * 60)
    print("REINDEX SUMMARY")
    print("=" * 60)
    print(f"Records:   {report.total}")
    print(f"Processed: {report.processed}")
    print(f"Indexed:   {report.indexed}")
    print(f"Skipped:   {report.skipped}")
    print(f"Failed:    {report.failed}")
    print("=" * 60)

    if output_path:
        output_path.write_text(json.dumps(report.model_dump(), indent=2))
        logger.info(f"Report saved to {output_path}")

    return report


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Rebuild the meeting vector index",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--records",
        type=Path,
        required=True,
        help="Path to a JSON or JSON Lines export of meeting records",
    )
    parser.add_argument(
        "--recreate",
        action="store_true",
        help="Drop and recreate the collection before indexing",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to save the report as JSON",
    )

    args = parser.parse_args()

    try:
        report = asyncio.run(
            run_reindex(
                records_path=args.records,
                recreate=args.recreate,
                output_path=args.output,
            )
        )
    except MeetingSearchError as e:
        logger.error(f"Reindex aborted: {e.message}", extra={"error_code": e.code.value})
        sys.exit(2)

    sys.exit(1 if report.failed else 0)


if __name__ == "__main__":
    main()
