"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class EmbeddingSettings(BaseSettings):
    """Local embedding model configuration."""

    model_config = SettingsConfigDict(env_prefix="EMBEDDING_")

    model: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2",
        description="Pretrained feature-extraction model identifier",
    )
    device: str | None = Field(
        default=None,
        description="Torch device for inference (auto-detected when unset)",
    )


class QdrantSettings(BaseSettings):
    """Qdrant vector database configuration."""

    model_config = SettingsConfigDict(env_prefix="QDRANT_")

    url: str = Field(
        default="http://localhost:6333",
        description="Qdrant server URL",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Qdrant API key",
    )
    require_api_key: bool = Field(
        default=True,
        description="Refuse to connect without an API key",
    )
    collection_name: str = Field(
        default="meetings",
        description="Collection holding meeting vectors",
    )
    distance: str = Field(
        default="Cosine",
        description="Collection distance metric (Cosine, Dot, Euclid, Manhattan)",
    )
    upsert_timeout: float = Field(
        default=30.0,
        description="Upsert timeout in seconds",
    )
    query_timeout: float = Field(
        default=10.0,
        description="Query timeout in seconds",
    )


class SearchSettings(BaseSettings):
    """Search endpoint configuration."""

    model_config = SettingsConfigDict(env_prefix="SEARCH_")

    default_top_k: int = Field(
        default=5,
        description="Number of matches returned when the caller does not ask",
    )
    max_top_k: int = Field(
        default=20,
        description="Upper bound on matches per query",
    )
    records_path: Path | None = Field(
        default=None,
        description="JSON or JSON Lines export used as the system of record",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # API settings
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        description="API server port",
    )

    # Nested settings
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    qdrant: QdrantSettings = Field(default_factory=QdrantSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
