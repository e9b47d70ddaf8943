"""Indexing module."""

from meeting_search.indexing.indexer import Indexer
from meeting_search.indexing.models import IndexOutcome, ReindexReport

__all__ = [
    "IndexOutcome",
    "Indexer",
    "ReindexReport",
]
