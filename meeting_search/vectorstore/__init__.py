"""Vector store module."""

from meeting_search.vectorstore.models import VectorMatch
from meeting_search.vectorstore.scoring import (
    ScoreConvention,
    convention_for_distance,
    to_relevance_score,
)
from meeting_search.vectorstore.service import QdrantVectorStore, VectorStore

__all__ = [
    "QdrantVectorStore",
    "ScoreConvention",
    "VectorMatch",
    "VectorStore",
    "convention_for_distance",
    "to_relevance_score",
]
