"""Tests for the indexer."""

from unittest.mock import AsyncMock

import pytest

from meeting_search.documents.models import MeetingRecord
from meeting_search.documents.sources import InMemoryRecordSource
from meeting_search.exceptions import ErrorCode, VectorStoreError
from meeting_search.indexing.indexer import Indexer
from meeting_search.indexing.models import IndexOutcome, ReindexReport
from meeting_search.policies import PropagatePolicy

from conftest import BagOfWordsEmbeddingService, InMemoryVectorStore


@pytest.fixture
def indexer(
    embedding_service: BagOfWordsEmbeddingService,
    vector_store: InMemoryVectorStore,
) -> Indexer:
    return Indexer(embedding_service, vector_store)


class TestReindexReport:
    """Tests for ReindexReport."""

    def test_record_counts_outcomes(self) -> None:
        report = ReindexReport()
        for outcome in (IndexOutcome.INDEXED, IndexOutcome.INDEXED, IndexOutcome.FAILED):
            report.record(outcome)
        report.record(IndexOutcome.SKIPPED)

        assert (report.indexed, report.skipped, report.failed) == (2, 1, 1)


class TestIndexDocument:
    """Tests for single-record indexing."""

    async def test_indexes_record(
        self,
        indexer: Indexer,
        vector_store: InMemoryVectorStore,
        q3_planning: MeetingRecord,
    ) -> None:
        outcome = await indexer.index_document(q3_planning)

        assert outcome is IndexOutcome.INDEXED
        _, metadata = vector_store.points["m1"]
        assert metadata["documentId"] == "m1"
        assert metadata["title"] == "Q3 Planning"
        assert metadata["body"] == q3_planning.body

    async def test_embeds_title_and_summary_with_body(
        self,
        indexer: Indexer,
        embedding_service: BagOfWordsEmbeddingService,
        q3_planning: MeetingRecord,
    ) -> None:
        await indexer.index_document(q3_planning)

        assert embedding_service.calls == [
            f"Q3 Planning\nDiscussed roadmap and budget.\n{q3_planning.body}"
        ]

    @pytest.mark.parametrize("body", [None, "", "   "])
    async def test_empty_body_skipped_without_side_effects(
        self,
        indexer: Indexer,
        embedding_service: BagOfWordsEmbeddingService,
        vector_store: InMemoryVectorStore,
        body: str | None,
    ) -> None:
        """Nothing is embedded or written for a record without a body."""
        record = MeetingRecord(id="m5", title="Standup", summary="Short update.", body=body)

        outcome = await indexer.index_document(record)

        assert outcome is IndexOutcome.SKIPPED
        assert embedding_service.calls == []
        assert vector_store.upsert_calls == 0

    async def test_reindexing_overwrites(
        self,
        indexer: Indexer,
        vector_store: InMemoryVectorStore,
        q3_planning: MeetingRecord,
    ) -> None:
        """Indexing the same id twice leaves one vector holding the latest fields."""
        await indexer.index_document(q3_planning)
        renamed = q3_planning.model_copy(update={"title": "Q3 Planning (final)"})
        await indexer.index_document(renamed)

        assert list(vector_store.points) == ["m1"]
        assert vector_store.points["m1"][1]["title"] == "Q3 Planning (final)"

    async def test_store_failure_is_absorbed(
        self,
        indexer: Indexer,
        vector_store: InMemoryVectorStore,
        q3_planning: MeetingRecord,
    ) -> None:
        vector_store.fail_upsert_for.add("m1")

        outcome = await indexer.index_document(q3_planning)

        assert outcome is IndexOutcome.FAILED
        assert vector_store.points == {}

    async def test_embedding_failure_is_absorbed(
        self,
        vector_store: InMemoryVectorStore,
        q3_planning: MeetingRecord,
    ) -> None:
        embedding_service = AsyncMock()
        embedding_service.embed = AsyncMock(side_effect=RuntimeError("model crashed"))
        indexer = Indexer(embedding_service, vector_store)

        assert await indexer.index_document(q3_planning) is IndexOutcome.FAILED
        assert vector_store.upsert_calls == 0

    async def test_propagate_policy_raises(
        self,
        embedding_service: BagOfWordsEmbeddingService,
        vector_store: InMemoryVectorStore,
        q3_planning: MeetingRecord,
    ) -> None:
        """A strict policy lets callers see indexing failures."""
        vector_store.fail_upsert_for.add("m1")
        indexer = Indexer(embedding_service, vector_store, policy=PropagatePolicy())

        with pytest.raises(VectorStoreError):
            await indexer.index_document(q3_planning)


class TestRemoveDocument:
    """Tests for vector removal."""

    async def test_removes_vector(
        self,
        indexer: Indexer,
        vector_store: InMemoryVectorStore,
        q3_planning: MeetingRecord,
    ) -> None:
        await indexer.index_document(q3_planning)

        await indexer.remove_document("m1")

        assert "m1" not in vector_store.points

    async def test_store_error_propagates(self, embedding_service: BagOfWordsEmbeddingService) -> None:
        store = AsyncMock()
        store.delete_by_id = AsyncMock(
            side_effect=VectorStoreError("index unreachable", code=ErrorCode.VECTOR_STORE_TIMEOUT)
        )
        indexer = Indexer(embedding_service, store)

        with pytest.raises(VectorStoreError):
            await indexer.remove_document("m1")


class TestReindexAll:
    """Tests for bulk reindexing."""

    async def test_counts_eligible_records(
        self,
        indexer: Indexer,
        vector_store: InMemoryVectorStore,
        record_source: InMemoryRecordSource,
    ) -> None:
        record_source.save(MeetingRecord(id="m4", title="Empty"))
        record_source.save(MeetingRecord(id="m5", title="Blank", body="  "))

        report = await indexer.reindex_all(record_source)

        assert report.total == 5
        assert report.processed == 3
        assert report.indexed == 3
        assert report.skipped == 2
        assert report.failed == 0
        assert sorted(vector_store.points) == ["m1", "m2", "m3"]

    async def test_failure_does_not_stop_run(
        self,
        indexer: Indexer,
        vector_store: InMemoryVectorStore,
        record_source: InMemoryRecordSource,
    ) -> None:
        vector_store.fail_upsert_for.add("m2")

        report = await indexer.reindex_all(record_source)

        assert report.processed == 3
        assert report.indexed == 2
        assert report.failed == 1
        assert sorted(vector_store.points) == ["m1", "m3"]

    async def test_empty_source(self, indexer: Indexer) -> None:
        report = await indexer.reindex_all(InMemoryRecordSource())
        assert report == ReindexReport()
