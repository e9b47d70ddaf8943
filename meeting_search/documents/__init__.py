"""Meeting records, normalization and record sources."""

from meeting_search.documents.models import EmbeddableDocument, MeetingRecord
from meeting_search.documents.normalizer import DocumentNormalizer
from meeting_search.documents.sources import (
    InMemoryRecordSource,
    JSONFileRecordSource,
    RecordSource,
)

__all__ = [
    "DocumentNormalizer",
    "EmbeddableDocument",
    "InMemoryRecordSource",
    "JSONFileRecordSource",
    "MeetingRecord",
    "RecordSource",
]
