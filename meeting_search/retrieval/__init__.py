"""Retrieval module."""

from meeting_search.retrieval.models import SearchResult
from meeting_search.retrieval.retriever import (
    Retriever,
    SemanticRetriever,
    fuse_with_records,
    match_to_result,
)

__all__ = [
    "Retriever",
    "SearchResult",
    "SemanticRetriever",
    "fuse_with_records",
    "match_to_result",
]
