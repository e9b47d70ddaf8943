"""Indexing data models."""

from enum import Enum

from pydantic import BaseModel, Field


class IndexOutcome(str, Enum):
    """What happened to one record passed to the indexer."""

    INDEXED = "indexed"
    SKIPPED = "skipped"
    FAILED = "failed"


class ReindexReport(BaseModel):
    """Summary of a bulk reindex run.

    Attributes:
        total: Records listed by the source.
        processed: Records with a non-empty body that indexing was attempted for.
        indexed: Records written to the vector store.
        skipped: Records with nothing to embed.
        failed: Records whose embedding or upsert failed.
    """

    total: int = Field(default=0, ge=0)
    processed: int = Field(default=0, ge=0)
    indexed: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)

    def record(self, outcome: IndexOutcome) -> None:
        """Count one indexing outcome."""
        if outcome is IndexOutcome.INDEXED:
            self.indexed += 1
        elif outcome is IndexOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
