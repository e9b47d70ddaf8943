"""Retrieval data models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SearchResult(BaseModel):
    """One ranked match for a search query.

    Serialized with camelCase keys (``documentId``, ``createdAt``).

    Attributes:
        document_id: Identifier of the matching meeting.
        title: Title stored with the vector.
        summary: Summary stored with the vector.
        body: Transcript stored with the vector.
        created_at: Creation time, if known.
        score: Relevance score (higher is more relevant), three decimals.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    document_id: str = Field(description="Document identifier")
    title: str = Field(default="", description="Meeting title")
    summary: str = Field(default="", description="Meeting summary")
    body: str = Field(default="", description="Meeting transcript")
    created_at: datetime | None = Field(default=None, description="Creation time")
    score: float = Field(description="Relevance score")
