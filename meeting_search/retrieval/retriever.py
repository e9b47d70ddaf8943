"""Retriever interface and semantic implementation."""

import time
from abc import ABC, abstractmethod

from meeting_search.documents.sources import RecordSource
from meeting_search.embeddings.service import EmbeddingService
from meeting_search.exceptions import InvalidQueryError, RetrievalError, ValidationError
from meeting_search.logging_config import get_logger
from meeting_search.observability.metrics import track_search_request
from meeting_search.policies import ErrorPolicy, PropagatePolicy
from meeting_search.retrieval.models import SearchResult
from meeting_search.vectorstore.models import VectorMatch
from meeting_search.vectorstore.scoring import ScoreConvention, to_relevance_score
from meeting_search.vectorstore.service import VectorStore

logger = get_logger(__name__)

DEFAULT_TOP_K = 5


class Retriever(ABC):
    """Abstract base class for retrievers."""

    @abstractmethod
    async def search(
        self,
        query: str,
        top_k: int = DEFAULT_TOP_K,
    ) -> list[SearchResult]:
        """Find the meetings most relevant to a query.

        Args:
            query: Free-text query; must contain a non-whitespace character.
            top_k: Maximum number of results to return.

        Returns:
            Results ordered by descending relevance.

        Raises:
            InvalidQueryError: If the query is blank.
            MeetingSearchError: If embedding or the store query fails.
        """
        ...


def match_to_result(match: VectorMatch, convention: ScoreConvention) -> SearchResult:
    """Shape a raw store match into a SearchResult.

    Display fields come from the stored metadata as-is.
    """
    payload = match.payload
    return SearchResult(
        document_id=str(payload.get("documentId") or match.id),
        title=payload.get("title") or "",
        summary=payload.get("summary") or "",
        body=payload.get("body") or "",
        created_at=payload.get("createdAt"),
        score=to_relevance_score(match.score, convention),
    )


class SemanticRetriever(Retriever):
    """Semantic search over meeting vectors.

    Embeds the query and returns the nearest stored meetings in the
    store's order. Failures propagate to the caller.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        policy: ErrorPolicy | None = None,
    ) -> None:
        """Initialize the semantic retriever.

        Args:
            embedding_service: Service for generating embeddings.
            vector_store: Vector database for similarity search.
            policy: Failure policy. Defaults to propagating RetrievalError.
        """
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._policy = policy or PropagatePolicy(RetrievalError)

    async def search(
        self,
        query: str,
        top_k: int = DEFAULT_TOP_K,
    ) -> list[SearchResult]:
        if not query or not query.strip():
            raise InvalidQueryError()
        if top_k < 1:
            raise ValidationError(
                "top_k must be a positive integer", details={"top_k": top_k}
            )

        start = time.perf_counter()
        try:
            results = await self._policy.execute(
                "Search",
                lambda: self._search(query, top_k),
                context={"query_length": len(query), "top_k": top_k},
            )
        except Exception:
            track_search_request(time.perf_counter() - start, 0, None, success=False)
            raise

        results = results or []
        track_search_request(
            time.perf_counter() - start,
            len(results),
            results[0].score if results else None,
        )
        return results

    async def _search(self, query: str, top_k: int) -> list[SearchResult]:
        embedding = await self._embedding_service.embed(query)
        if embedding.is_empty:
            logger.warning("Query produced an empty embedding")
            return []

        matches = await self._vector_store.query(
            embedding.embedding, top_k=top_k, include_metadata=True
        )
        convention = self._vector_store.score_convention
        results = [match_to_result(match, convention) for match in matches]

        logger.debug(
            f"Retrieved {len(results)} results for query",
            extra={"query_length": len(query), "top_k": top_k},
        )
        return results


async def fuse_with_records(
    results: list[SearchResult],
    source: RecordSource,
) -> list[SearchResult]:
    """Overlay authoritative record fields onto search results.

    Title, summary and creation time come from the system of record when
    the record still exists and has them; otherwise the stored metadata is
    kept. Order and scores are unchanged.
    """
    fused: list[SearchResult] = []
    for result in results:
        record = await source.get_by_id(result.document_id)
        if record is None:
            fused.append(result)
            continue

        fused.append(
            result.model_copy(
                update={
                    "title": record.title or result.title,
                    "summary": record.summary or result.summary,
                    "created_at": record.created_at or result.created_at,
                }
            )
        )
    return fused
