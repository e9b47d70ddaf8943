"""Embedding service module."""

from meeting_search.embeddings.models import EmbeddingResult
from meeting_search.embeddings.service import (
    EmbeddingService,
    SentenceTransformerEmbeddingService,
)

__all__ = [
    "EmbeddingResult",
    "EmbeddingService",
    "SentenceTransformerEmbeddingService",
]
