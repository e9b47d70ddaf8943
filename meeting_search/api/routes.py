"""API routes for meeting search and indexing."""

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, Field

from meeting_search.config import get_settings
from meeting_search.context import SearchContext
from meeting_search.documents.models import MeetingRecord
from meeting_search.documents.sources import RecordSource
from meeting_search.exceptions import ConfigurationError, InvalidQueryError
from meeting_search.indexing.models import IndexOutcome
from meeting_search.logging_config import get_logger
from meeting_search.retrieval.models import SearchResult
from meeting_search.retrieval.retriever import fuse_with_records

logger = get_logger(__name__)


router = APIRouter(prefix="/api", tags=["Search"])


class SearchRequest(BaseModel):
    """Request body for semantic search."""

    query: str = Field(default="", description="Free-text search query")
    top_k: int | None = Field(
        default=None,
        ge=1,
        description="Number of results (defaults to SEARCH_DEFAULT_TOP_K)",
    )


class SearchResponse(BaseModel):
    """Response from semantic search."""

    results: list[SearchResult] = Field(description="Ranked matches")


class IndexResponse(BaseModel):
    """Response from the index hook."""

    document_id: str = Field(serialization_alias="documentId")
    outcome: IndexOutcome


def get_search_context(request: Request) -> SearchContext:
    """Dependency returning the context built at startup."""
    context = getattr(request.app.state, "search_context", None)
    if context is None:
        raise ConfigurationError("Search context is not initialized")
    return context


def get_record_source(request: Request) -> RecordSource:
    """Dependency returning the system-of-record adapter."""
    source = getattr(request.app.state, "record_source", None)
    if source is None:
        raise ConfigurationError("Record source is not initialized")
    return source


@router.post("/search", response_model=SearchResponse)
async def search_endpoint(
    request: SearchRequest,
    context: SearchContext = Depends(get_search_context),
    records: RecordSource = Depends(get_record_source),
) -> SearchResponse:
    """Search meetings by meaning and merge in current record data."""
    if not request.query.strip():
        raise InvalidQueryError()

    settings = get_settings().search
    top_k = min(request.top_k or settings.default_top_k, settings.max_top_k)

    logger.info("Semantic search", extra={"query_length": len(request.query), "top_k": top_k})
    results = await context.retriever.search(request.query, top_k=top_k)
    return SearchResponse(results=await fuse_with_records(results, records))


@router.post("/index", response_model=IndexResponse)
async def index_endpoint(
    record: MeetingRecord,
    context: SearchContext = Depends(get_search_context),
) -> IndexResponse:
    """Record lifecycle hook: (re)index a created or updated meeting.

    The caller has already persisted the record. Indexing failures are
    logged and reported in ``outcome``; they never fail the request.
    """
    outcome = await context.indexer.index_document(record)
    return IndexResponse(document_id=record.id, outcome=outcome)


@router.delete("/index/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_endpoint(
    document_id: str,
    context: SearchContext = Depends(get_search_context),
) -> Response:
    """Record lifecycle hook: drop the vector of a deleted meeting."""
    await context.indexer.remove_document(document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
