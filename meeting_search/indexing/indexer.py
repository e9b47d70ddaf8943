"""Indexing of meeting records into the vector store."""

import time

from meeting_search.documents.models import EmbeddableDocument, MeetingRecord
from meeting_search.documents.normalizer import DocumentNormalizer
from meeting_search.documents.sources import RecordSource
from meeting_search.embeddings.service import EmbeddingService
from meeting_search.indexing.models import IndexOutcome, ReindexReport
from meeting_search.logging_config import get_logger
from meeting_search.observability.metrics import track_index_outcome
from meeting_search.policies import BestEffortPolicy, ErrorPolicy
from meeting_search.vectorstore.service import VectorStore

logger = get_logger(__name__)


class Indexer:
    """Writes meeting records to the vector store.

    Indexing is best effort: embedding and store failures are logged and
    reported as ``IndexOutcome.FAILED``, never raised to the caller.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        normalizer: DocumentNormalizer | None = None,
        policy: ErrorPolicy | None = None,
    ) -> None:
        """Initialize the indexer.

        Args:
            embedding_service: Service for generating embeddings.
            vector_store: Vector index to write to.
            normalizer: Record normalizer. Uses the default rules if not provided.
            policy: Failure policy. Defaults to best effort.
        """
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._normalizer = normalizer or DocumentNormalizer()
        self._policy = policy or BestEffortPolicy()

    async def index_document(self, record: MeetingRecord) -> IndexOutcome:
        """Embed and upsert one record.

        Args:
            record: Record to index. Re-indexing an id overwrites its vector.

        Returns:
            The outcome for this record.
        """
        document = self._normalizer.normalize(record)
        if document is None:
            logger.warning(
                "Skipping empty meeting document", extra={"document_id": record.id}
            )
            track_index_outcome(IndexOutcome.SKIPPED.value)
            return IndexOutcome.SKIPPED

        outcome = await self._policy.execute(
            "Indexing",
            lambda: self._write(document),
            fallback=IndexOutcome.FAILED,
            context={"document_id": record.id},
        )
        outcome = outcome or IndexOutcome.FAILED
        track_index_outcome(outcome.value)
        return outcome

    async def _write(self, document: EmbeddableDocument) -> IndexOutcome:
        result = await self._embedding_service.embed(document.text)
        if result.is_empty:
            logger.warning(
                "Skipping document with empty embedding",
                extra={"document_id": document.id},
            )
            return IndexOutcome.SKIPPED

        await self._vector_store.upsert(document.id, result.embedding, document.metadata)
        logger.info(
            f"Indexed meeting: {document.title}",
            extra={"document_id": document.id, "dimensions": result.dimensions},
        )
        return IndexOutcome.INDEXED

    async def remove_document(self, document_id: str) -> None:
        """Delete the vector for a record removed from the system of record.

        Raises:
            VectorStoreError: If the store rejects the deletion.
        """
        await self._vector_store.delete_by_id(document_id)

    async def reindex_all(self, source: RecordSource) -> ReindexReport:
        """Index every record with a non-empty body, one at a time.

        A failing record does not stop the run and nothing is rolled back.
        Meant for offline maintenance, not the request path.

        Args:
            source: The system of record.

        Returns:
            Counts for the run.
        """
        start = time.perf_counter()
        records = await source.list_all()
        eligible = [record for record in records if record.has_body]
        report = ReindexReport(total=len(records), skipped=len(records) - len(eligible))

        logger.info(f"Reindexing {len(eligible)} meetings", extra={"total": len(records)})

        for record in eligible:
            report.processed += 1
            report.record(await self.index_document(record))

        logger.info(
            f"Reindex finished: {report.processed} processed",
            extra={
                **report.model_dump(),
                "seconds": round(time.perf_counter() - start, 2),
            },
        )
        return report
