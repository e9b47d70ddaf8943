"""Derivation of embeddable text from possibly incomplete meeting records.

Sparse records stay searchable: a placeholder or missing title, and a
missing or very short summary, are replaced by excerpts of the transcript.
Tokens are split on whitespace only.
"""

from meeting_search.documents.models import EmbeddableDocument, MeetingRecord
from meeting_search.logging_config import get_logger

logger = get_logger(__name__)

ELLIPSIS = "..."
PLACEHOLDER_TITLE = "untitled"
TITLE_EXCERPT_TOKENS = 6
SUMMARY_EXCERPT_TOKENS = 50
MIN_SUMMARY_CHARS = 20


def excerpt(body: str, tokens: int) -> str:
    """First ``tokens`` whitespace-delimited words of ``body`` plus an ellipsis."""
    return " ".join(body.split()[:tokens]) + ELLIPSIS


def resolve_title(title: str | None, body: str) -> str:
    """Keep a real title; replace blank or "untitled" placeholders."""
    title = (title or "").strip()
    if not title or PLACEHOLDER_TITLE in title.lower():
        return excerpt(body, TITLE_EXCERPT_TOKENS)
    return title


def resolve_summary(summary: str | None, body: str) -> str:
    """Keep a summary of at least MIN_SUMMARY_CHARS; otherwise excerpt the body."""
    summary = (summary or "").strip()
    if len(summary) < MIN_SUMMARY_CHARS:
        return excerpt(body, SUMMARY_EXCERPT_TOKENS)
    return summary


class DocumentNormalizer:
    """Turns meeting records into embeddable documents."""

    def normalize(self, record: MeetingRecord) -> EmbeddableDocument | None:
        """Build the embeddable document for ``record``.

        Title and summary are repeated ahead of the body in the embedding
        input so their terms are not drowned out by a long transcript.

        Returns:
            The document, or None when the record has no body. No body is
            synthesized from title or summary alone.
        """
        if not record.has_body:
            logger.debug("Record has no body", extra={"document_id": record.id})
            return None

        body = record.body or ""
        title = resolve_title(record.title, body)
        summary = resolve_summary(record.summary, body)

        return EmbeddableDocument(
            id=record.id,
            title=title,
            summary=summary,
            text=f"{title}\n{summary}\n{body}",
            metadata={
                "documentId": record.id,
                "title": title,
                "summary": summary,
                "body": body,
                "createdAt": (
                    record.created_at.isoformat() if record.created_at else None
                ),
            },
        )
