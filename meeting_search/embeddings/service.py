"""Embedding service interface and local model implementation."""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from meeting_search.config import EmbeddingSettings, get_settings
from meeting_search.embeddings.models import EmbeddingResult
from meeting_search.embeddings.pooling import l2_normalize, mean_pool, to_array
from meeting_search.exceptions import EmbeddingError, ErrorCode
from meeting_search.logging_config import get_logger
from meeting_search.observability.metrics import track_embedding_request

logger = get_logger(__name__)

ModelFactory = Callable[[str, str | None], Any]


def load_sentence_transformer(model_name: str, device: str | None) -> Any:
    """Load a sentence-transformers model by name."""
    from sentence_transformers import SentenceTransformer

    return SentenceTransformer(model_name, device=device)


class EmbeddingService(ABC):
    """Abstract base class for embedding services.

    Defines the interface for generating text embeddings.
    """

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed. Empty or whitespace-only input yields an
                empty result instead of an error.

        Returns:
            EmbeddingResult with vector.

        Raises:
            EmbeddingError: If the model is unavailable or inference fails.
        """
        ...

    @abstractmethod
    async def get_dimensions(self) -> int:
        """Get the embedding dimensions, loading the model if needed."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...

    @property
    def is_loaded(self) -> bool:
        """Whether the underlying model is ready."""
        return True

    async def close(self) -> None:
        """Release model resources."""
        return None


class SentenceTransformerEmbeddingService(EmbeddingService):
    """Embedding service backed by a local feature-extraction model.

    The model is loaded on the first non-empty call and reused for the life
    of the service. Token embeddings are mean pooled and L2-normalized so
    cosine and dot-product scoring agree.
    """

    def __init__(
        self,
        settings: EmbeddingSettings | None = None,
        model_factory: ModelFactory | None = None,
    ) -> None:
        """Initialize the embedding service.

        Args:
            settings: Embedding configuration. Uses defaults if not provided.
            model_factory: Callable ``(model_name, device) -> model``. Loads a
                sentence-transformers model if not provided.
        """
        self._settings = settings or get_settings().embedding
        self._model_factory = model_factory or load_sentence_transformer
        self._model: Any = None
        self._load_lock = asyncio.Lock()

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.model

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    async def _get_model(self) -> Any:
        """Load the model once; concurrent callers wait for the same load."""
        if self._model is not None:
            return self._model

        async with self._load_lock:
            if self._model is not None:
                return self._model

            logger.info(
                "Loading embedding model",
                extra={"model": self.model_name, "device": self._settings.device},
            )
            start = time.perf_counter()
            try:
                self._model = await asyncio.to_thread(
                    self._model_factory, self.model_name, self._settings.device
                )
            except Exception as e:
                logger.error(f"Embedding model failed to load: {e}")
                raise EmbeddingError(
                    f"Embedding model unavailable: {self.model_name}",
                    code=ErrorCode.EMBEDDING_MODEL_UNAVAILABLE,
                    details={"model": self.model_name, "error": str(e)},
                ) from e

            logger.info(
                "Embedding model loaded",
                extra={
                    "model": self.model_name,
                    "seconds": round(time.perf_counter() - start, 2),
                },
            )
            return self._model

    async def get_dimensions(self) -> int:
        model = await self._get_model()
        return int(model.get_sentence_embedding_dimension())

    async def embed(self, text: str) -> EmbeddingResult:
        """Generate an embedding for a single text.

        Args:
            text: Text to embed.

        Returns:
            EmbeddingResult with a unit-length vector, or an empty result for
            blank input.

        Raises:
            EmbeddingError: If the model cannot be loaded or inference fails.
        """
        if not text or not text.strip():
            return EmbeddingResult.empty(text, self.model_name)

        model = await self._get_model()

        start = time.perf_counter()
        try:
            vector = await asyncio.to_thread(self._encode, model, text)
        except Exception as e:
            track_embedding_request(
                self.model_name, time.perf_counter() - start, success=False
            )
            logger.error(
                f"Embedding failed: {e}",
                extra={"model": self.model_name, "text_length": len(text)},
            )
            raise EmbeddingError(
                f"Failed to embed text: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"model": self.model_name, "error": str(e)},
            ) from e

        track_embedding_request(self.model_name, time.perf_counter() - start)

        return EmbeddingResult(
            text=text,
            embedding=vector,
            model=self.model_name,
            dimensions=len(vector),
        )

    @staticmethod
    def _encode(model: Any, text: str) -> list[float]:
        """Run the model and pool its token embeddings into one vector."""
        token_embeddings = model.encode(
            text,
            output_value="token_embeddings",
            convert_to_numpy=False,
            convert_to_tensor=False,
            show_progress_bar=False,
        )
        pooled = mean_pool(to_array(token_embeddings))
        return [float(x) for x in l2_normalize(pooled)]

    async def close(self) -> None:
        """Drop the model reference."""
        self._model = None
