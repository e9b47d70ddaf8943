"""Meeting record and embeddable document models."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class MeetingRecord(BaseModel):
    """A meeting as held by the system of record.

    Accepts the camelCase ``createdAt`` and the ``transcript`` field name
    used by upstream producers.

    Attributes:
        id: Stable identifier owned by the system of record.
        title: Meeting title, possibly a generic placeholder.
        summary: Generated summary, absent until summarization has run.
        body: Full transcript.
        created_at: When the meeting was created.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1, description="Record identifier")
    title: str | None = Field(default=None, description="Meeting title")
    summary: str | None = Field(default=None, description="Meeting summary")
    body: str | None = Field(
        default=None,
        validation_alias=AliasChoices("body", "transcript"),
        description="Transcript text",
    )
    created_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt"),
        description="Creation time",
    )

    @property
    def has_body(self) -> bool:
        return bool(self.body and self.body.strip())


class EmbeddableDocument(BaseModel):
    """The unit written to the vector index.

    Attributes:
        id: Same identifier as the source record.
        title: Resolved title (original or derived from the body).
        summary: Resolved summary (original or derived from the body).
        text: Embedding input; never persisted.
        metadata: Stored with the vector and returned verbatim on query.
    """

    id: str
    title: str
    summary: str
    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)
