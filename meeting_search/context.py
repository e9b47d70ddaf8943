"""Process-wide handle on the embedding model and the vector index.

Built once at startup and passed to the indexer and retriever, so both
share one model load and one store connection.
"""

from meeting_search.config import Settings, get_settings
from meeting_search.embeddings.service import (
    EmbeddingService,
    SentenceTransformerEmbeddingService,
)
from meeting_search.exceptions import ConfigurationError
from meeting_search.indexing.indexer import Indexer
from meeting_search.logging_config import get_logger
from meeting_search.retrieval.retriever import Retriever, SemanticRetriever
from meeting_search.vectorstore.service import QdrantVectorStore, VectorStore

logger = get_logger(__name__)


class SearchContext:
    """Owns the shared embedding service and vector store."""

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
    ) -> None:
        self.embedding_service = embedding_service
        self.vector_store = vector_store
        self.indexer = Indexer(embedding_service, vector_store)
        self.retriever: Retriever = SemanticRetriever(embedding_service, vector_store)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SearchContext":
        """Build the production context.

        Raises:
            ConfigurationError: If the model identifier is missing.
        """
        settings = settings or get_settings()
        if not settings.embedding.model.strip():
            raise ConfigurationError("EMBEDDING_MODEL must not be empty")

        return cls(
            embedding_service=SentenceTransformerEmbeddingService(settings.embedding),
            vector_store=QdrantVectorStore(settings.qdrant),
        )

    def readiness(self) -> dict[str, str]:
        """Component states for the readiness probe."""
        return {
            "embedding_model": "loaded" if self.embedding_service.is_loaded else "cold",
            "vector_store": "connected" if self.vector_store.is_connected else "cold",
        }

    async def close(self) -> None:
        """Release the model and the store connection."""
        await self.vector_store.close()
        await self.embedding_service.close()
        logger.info("Search context closed")
