"""Vector store data models."""

from typing import Any

from pydantic import BaseModel, Field


class VectorMatch(BaseModel):
    """Raw match from a vector similarity query.

    Attributes:
        id: Document identifier.
        score: Score in the store's native orientation.
        payload: Stored metadata.
    """

    id: str = Field(description="Document identifier")
    score: float = Field(description="Raw store score")
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Record metadata",
    )
