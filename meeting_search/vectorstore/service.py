"""Vector store interface and Qdrant implementation."""

import asyncio
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import Any, TypeVar

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import Distance, PointIdsList, PointStruct, VectorParams

from meeting_search.config import QdrantSettings, get_settings
from meeting_search.exceptions import (
    ConfigurationError,
    ErrorCode,
    ValidationError,
    VectorStoreError,
)
from meeting_search.logging_config import get_logger
from meeting_search.observability.metrics import track_vectorstore_operation
from meeting_search.vectorstore.models import VectorMatch
from meeting_search.vectorstore.scoring import ScoreConvention, convention_for_distance

logger = get_logger(__name__)

T = TypeVar("T")

# Namespace for deriving Qdrant point ids from document ids.
POINT_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "meeting-search/documents")

DOCUMENT_ID_KEY = "documentId"


def point_id_for(document_id: str) -> str:
    """Derive the stable Qdrant point id (a UUID) for a document id."""
    return str(uuid.uuid5(POINT_ID_NAMESPACE, document_id))


class VectorStore(ABC):
    """Abstract base class for vector stores.

    One store instance talks to one index. Implementations perform no
    retries; failures surface as VectorStoreError.
    """

    @property
    @abstractmethod
    def score_convention(self) -> ScoreConvention:
        """Orientation of the raw scores returned by ``query``."""
        ...

    @property
    def is_connected(self) -> bool:
        """Whether a connection handle has been created."""
        return True

    @abstractmethod
    async def connect(self) -> Any:
        """Create the index handle, or return the cached one.

        Raises:
            ConfigurationError: If credentials or the index name are missing.
        """
        ...

    @abstractmethod
    async def upsert(
        self,
        id: str,
        vector: list[float],
        metadata: dict[str, Any],
    ) -> None:
        """Insert or overwrite the vector stored for ``id``.

        Raises:
            VectorStoreError: If the write fails.
        """
        ...

    @abstractmethod
    async def query(
        self,
        vector: list[float],
        top_k: int,
        include_metadata: bool = True,
    ) -> list[VectorMatch]:
        """Find the nearest stored vectors.

        Args:
            vector: Query vector.
            top_k: Maximum number of matches.
            include_metadata: Return stored metadata with each match.

        Returns:
            Matches ordered as returned by the store, at most ``top_k``.

        Raises:
            VectorStoreError: If the query fails.
        """
        ...

    @abstractmethod
    async def delete_by_id(self, id: str) -> None:
        """Remove the vector stored for ``id``.

        Raises:
            VectorStoreError: If deletion fails.
        """
        ...

    async def close(self) -> None:
        """Release the connection."""
        return None


class QdrantVectorStore(VectorStore):
    """Qdrant vector store implementation."""

    def __init__(
        self,
        settings: QdrantSettings | None = None,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """Initialize Qdrant vector store.

        Args:
            settings: Qdrant configuration.
            client: Existing client (for testing).
        """
        self._settings = settings or get_settings().qdrant
        self._client = client
        self._owns_client = client is None
        self._connect_lock = asyncio.Lock()
        self._convention = convention_for_distance(self._settings.distance)
        self._distance_verified = False

    @property
    def collection(self) -> str:
        return self._settings.collection_name

    @property
    def score_convention(self) -> ScoreConvention:
        return self._convention

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def _api_key(self) -> str | None:
        """Return the API key, enforcing it when required."""
        api_key = None
        if self._settings.api_key is not None:
            api_key = self._settings.api_key.get_secret_value().strip() or None

        if api_key is None and self._settings.require_api_key:
            raise ConfigurationError(
                "QDRANT_API_KEY is required to connect to the vector index",
                details={"url": self._settings.url},
            )
        return api_key

    async def connect(self) -> AsyncQdrantClient:
        """Create the Qdrant client once; later calls reuse it."""
        if not self.collection.strip():
            raise ConfigurationError("QDRANT_COLLECTION_NAME must not be empty")

        if self._client is not None:
            return self._client

        async with self._connect_lock:
            if self._client is None:
                api_key = self._api_key()
                self._client = AsyncQdrantClient(
                    url=self._settings.url,
                    api_key=api_key,
                )
                logger.info(
                    "Connected to vector index",
                    extra={"url": self._settings.url, "collection": self.collection},
                )
        return self._client

    async def close(self) -> None:
        """Close the Qdrant client."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    async def _run(
        self,
        operation: str,
        call: Awaitable[T],
        timeout: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> T:
        """Await a client call, bounding it by ``timeout`` and wrapping errors."""
        details = {"collection": self.collection, **(details or {})}
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(call, timeout=timeout)
        except VectorStoreError:
            track_vectorstore_operation(operation, time.perf_counter() - start, False)
            raise
        except TimeoutError as e:
            track_vectorstore_operation(operation, time.perf_counter() - start, False)
            raise VectorStoreError(
                f"Vector store {operation} timed out after {timeout}s",
                code=ErrorCode.VECTOR_STORE_TIMEOUT,
                details={**details, "timeout": timeout},
            ) from e
        except Exception as e:
            track_vectorstore_operation(operation, time.perf_counter() - start, False)
            raise VectorStoreError(
                f"Failed to {operation}: {e}",
                code=ErrorCode.VECTOR_STORE_ERROR,
                details={**details, "error": str(e)},
            ) from e

        track_vectorstore_operation(operation, time.perf_counter() - start)
        return result

    async def collection_exists(self) -> bool:
        """Check if the collection exists."""
        client = await self.connect()
        return await self._run(
            "check collection", client.collection_exists(self.collection)
        )

    async def create_collection(self, dimensions: int) -> None:
        """Create the collection with the configured distance metric."""
        if await self.collection_exists():
            raise VectorStoreError(
                f"Collection already exists: {self.collection}",
                code=ErrorCode.COLLECTION_EXISTS,
                details={"collection": self.collection},
            )

        client = await self.connect()
        await self._run(
            "create collection",
            client.create_collection(
                collection_name=self.collection,
                vectors_config=VectorParams(
                    size=dimensions,
                    distance=Distance[self._settings.distance.strip().upper()],
                ),
            ),
        )
        logger.info(
            f"Created collection: {self.collection}",
            extra={"dimensions": dimensions, "distance": self._settings.distance},
        )

    async def delete_collection(self) -> None:
        """Delete the collection and every vector in it."""
        if not await self.collection_exists():
            raise VectorStoreError(
                f"Collection not found: {self.collection}",
                code=ErrorCode.COLLECTION_NOT_FOUND,
                details={"collection": self.collection},
            )

        client = await self.connect()
        await self._run("delete collection", client.delete_collection(self.collection))
        logger.info(f"Deleted collection: {self.collection}")

    async def verify_distance(self) -> None:
        """Check the collection's distance metric against QDRANT_DISTANCE.

        Relevance scores are derived from the configured metric, so the
        collection must have been created with the same one.

        Raises:
            ConfigurationError: If the collection uses a different metric.
            VectorStoreError: If the collection cannot be described.
        """
        client = await self.connect()
        info = await self._run(
            "describe collection",
            client.get_collection(self.collection),
            timeout=self._settings.query_timeout,
        )

        vectors = info.config.params.vectors
        if isinstance(vectors, dict):
            # Queries target the unnamed default vector
            vectors = vectors.get("")
        if vectors is None:
            raise ConfigurationError(
                f"Collection {self.collection} has no dense vector configuration",
                details={"collection": self.collection},
            )

        expected = Distance[self._settings.distance.strip().upper()]
        if vectors.distance != expected:
            raise ConfigurationError(
                f"Collection {self.collection} uses {vectors.distance.value} distance "
                f"but QDRANT_DISTANCE is {expected.value}",
                details={
                    "collection": self.collection,
                    "collection_distance": vectors.distance.value,
                    "configured_distance": expected.value,
                },
            )
        self._distance_verified = True

    async def upsert(
        self,
        id: str,
        vector: list[float],
        metadata: dict[str, Any],
    ) -> None:
        """Write the point for ``id``, replacing any earlier one."""
        client = await self.connect()
        point = PointStruct(
            id=point_id_for(id),
            vector=vector,
            payload={DOCUMENT_ID_KEY: id, **metadata},
        )

        await self._run(
            "upsert",
            client.upsert(collection_name=self.collection, points=[point]),
            timeout=self._settings.upsert_timeout,
            details={"document_id": id},
        )
        logger.debug("Upserted vector", extra={"document_id": id})

    async def query(
        self,
        vector: list[float],
        top_k: int,
        include_metadata: bool = True,
    ) -> list[VectorMatch]:
        """Return up to ``top_k`` nearest points in store order."""
        if top_k < 1:
            raise ValidationError(
                "top_k must be a positive integer", details={"top_k": top_k}
            )

        if not self._distance_verified:
            await self.verify_distance()

        client = await self.connect()
        response = await self._run(
            "query",
            client.query_points(
                collection_name=self.collection,
                query=vector,
                limit=top_k,
                with_payload=include_metadata,
            ),
            timeout=self._settings.query_timeout,
            details={"top_k": top_k},
        )

        matches: list[VectorMatch] = []
        for point in response.points:
            payload = dict(point.payload) if point.payload else {}
            matches.append(
                VectorMatch(
                    id=str(payload.get(DOCUMENT_ID_KEY, point.id)),
                    score=point.score if point.score is not None else 0.0,
                    payload=payload,
                )
            )
        return matches

    async def delete_by_id(self, id: str) -> None:
        """Delete the point stored for ``id``."""
        client = await self.connect()
        await self._run(
            "delete",
            client.delete(
                collection_name=self.collection,
                points_selector=PointIdsList(points=[point_id_for(id)]),
            ),
            timeout=self._settings.upsert_timeout,
            details={"document_id": id},
        )
        logger.info("Deleted vector", extra={"document_id": id})
