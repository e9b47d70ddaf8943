"""Pytest configuration and shared fixtures."""

import re
import zlib
from collections.abc import AsyncGenerator
from typing import Any

import numpy as np
import pytest
from httpx import ASGITransport, AsyncClient

from meeting_search.api.app import create_app
from meeting_search.context import SearchContext
from meeting_search.documents.models import MeetingRecord
from meeting_search.documents.sources import InMemoryRecordSource
from meeting_search.embeddings.models import EmbeddingResult
from meeting_search.embeddings.service import EmbeddingService
from meeting_search.exceptions import VectorStoreError
from meeting_search.vectorstore.models import VectorMatch
from meeting_search.vectorstore.scoring import ScoreConvention
from meeting_search.vectorstore.service import VectorStore

_WORD = re.compile(r"[a-z0-9]+")


class BagOfWordsEmbeddingService(EmbeddingService):
    """Deterministic hashed bag-of-words embedder for tests."""

    def __init__(self, dimensions: int = 1024) -> None:
        self._dimensions = dimensions
        self.calls: list[str] = []

    @property
    def model_name(self) -> str:
        return "bag-of-words"

    async def get_dimensions(self) -> int:
        return self._dimensions

    async def embed(self, text: str) -> EmbeddingResult:
        self.calls.append(text)
        if not text.strip():
            return EmbeddingResult.empty(text, self.model_name)

        vector = np.zeros(self._dimensions, dtype=np.float64)
        for word in _WORD.findall(text.lower()):
            vector[zlib.crc32(word.encode()) % self._dimensions] += 1.0
        norm = np.linalg.norm(vector)
        if norm:
            vector = vector / norm
        embedding = [float(x) for x in vector]
        return EmbeddingResult(
            text=text,
            embedding=embedding,
            model=self.model_name,
            dimensions=len(embedding),
        )


class InMemoryVectorStore(VectorStore):
    """Exact cosine-similarity store keyed by document id."""

    def __init__(self) -> None:
        self.points: dict[str, tuple[list[float], dict[str, Any]]] = {}
        self.upsert_calls = 0
        self.fail_upsert_for: set[str] = set()
        self.fail_queries = False

    @property
    def score_convention(self) -> ScoreConvention:
        return ScoreConvention.SIMILARITY

    async def connect(self) -> "InMemoryVectorStore":
        return self

    async def upsert(self, id: str, vector: list[float], metadata: dict[str, Any]) -> None:
        self.upsert_calls += 1
        if id in self.fail_upsert_for:
            raise VectorStoreError(f"upsert rejected for {id}")
        self.points[id] = (vector, dict(metadata))

    async def query(
        self,
        vector: list[float],
        top_k: int,
        include_metadata: bool = True,
    ) -> list[VectorMatch]:
        if self.fail_queries:
            raise VectorStoreError("index unreachable")
        query = np.asarray(vector)
        scored = [
            (float(np.dot(query, np.asarray(stored))), doc_id, metadata)
            for doc_id, (stored, metadata) in self.points.items()
        ]
        scored.sort(key=lambda item: item[0], reverse=True)
        return [
            VectorMatch(id=doc_id, score=score, payload=metadata if include_metadata else {})
            for score, doc_id, metadata in scored[:top_k]
        ]

    async def delete_by_id(self, id: str) -> None:
        self.points.pop(id, None)


@pytest.fixture
def embedding_service() -> BagOfWordsEmbeddingService:
    return BagOfWordsEmbeddingService()


@pytest.fixture
def vector_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def search_context(
    embedding_service: BagOfWordsEmbeddingService,
    vector_store: InMemoryVectorStore,
) -> SearchContext:
    return SearchContext(embedding_service, vector_store)


@pytest.fixture
def q3_planning() -> MeetingRecord:
    """The Q3 planning meeting used by round-trip tests."""
    return MeetingRecord(
        id="m1",
        title="Q3 Planning",
        summary="Discussed roadmap and budget.",
        body=(
            "We reviewed the Q3 roadmap and the hiring plan. "
            "After some debate the budget allocation was approved for the next quarter."
        ),
    )


@pytest.fixture
def other_meetings() -> list[MeetingRecord]:
    return [
        MeetingRecord(
            id="m2",
            title="Security Review",
            summary="Walked through the incident response checklist.",
            body="The on-call rotation and incident response runbooks were updated.",
        ),
        MeetingRecord(
            id="m3",
            title="Design Sync",
            summary="Agreed on typography and colour tokens.",
            body="Designers presented new typography scales and colour palettes for the app.",
        ),
    ]


@pytest.fixture
def record_source(
    q3_planning: MeetingRecord, other_meetings: list[MeetingRecord]
) -> InMemoryRecordSource:
    return InMemoryRecordSource([q3_planning, *other_meetings])


@pytest.fixture
async def client(
    search_context: SearchContext,
    record_source: InMemoryRecordSource,
) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for an app wired to in-memory fakes.

    Yields:
        AsyncClient configured for testing.
    """
    app = create_app(context=search_context, record_source=record_source)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
