"""Read access to the system of record.

The search core never writes to the system of record; it reads single
records for result fusion and full listings for bulk reindexing.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from meeting_search.documents.models import MeetingRecord
from meeting_search.exceptions import DocumentError, ErrorCode
from meeting_search.logging_config import get_logger

logger = get_logger(__name__)


class RecordSource(ABC):
    """Abstract base class for meeting record sources."""

    @abstractmethod
    async def get_by_id(self, record_id: str) -> MeetingRecord | None:
        """Fetch one record.

        Args:
            record_id: Record identifier.

        Returns:
            The record, or None if it does not exist.
        """
        ...

    @abstractmethod
    async def list_all(self) -> list[MeetingRecord]:
        """List every record in the source."""
        ...


class InMemoryRecordSource(RecordSource):
    """Record source backed by a dict, keyed by record id."""

    def __init__(self, records: list[MeetingRecord] | None = None) -> None:
        self._records: dict[str, MeetingRecord] = {}
        for record in records or []:
            self.save(record)

    def save(self, record: MeetingRecord) -> None:
        """Insert or replace a record."""
        self._records[record.id] = record

    def delete(self, record_id: str) -> bool:
        """Remove a record. Returns False if it was not present."""
        return self._records.pop(record_id, None) is not None

    async def get_by_id(self, record_id: str) -> MeetingRecord | None:
        return self._records.get(record_id)

    async def list_all(self) -> list[MeetingRecord]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)


def _unwrap_extended_json(item: dict[str, Any]) -> dict[str, Any]:
    """Flatten the Mongo extended JSON wrappers found in database exports.

    ``{"$oid": ...}`` ids become plain strings, and ``{"$date": ...}``
    timestamps become ISO strings or epoch milliseconds.
    """
    item = dict(item)
    if "id" not in item and "_id" in item:
        raw_id = item["_id"]
        if isinstance(raw_id, dict):
            raw_id = raw_id.get("$oid", raw_id)
        item["id"] = str(raw_id)
    for key in ("createdAt", "created_at"):
        value = item.get(key)
        if isinstance(value, dict) and "$date" in value:
            value = value["$date"]
            if isinstance(value, dict) and "$numberLong" in value:
                value = int(value["$numberLong"])
            item[key] = value
    return item


class JSONFileRecordSource(InMemoryRecordSource):
    """Record source loaded from a JSON export.

    Supports a JSON array of records (``.json``) and one record per line
    (``.jsonl``/``.ndjson``).
    """

    LINE_DELIMITED_EXTENSIONS = {".jsonl", ".ndjson"}

    def __init__(self, path: str | Path, encoding: str = "utf-8") -> None:
        """Load all records from ``path``.

        Raises:
            DocumentError: If the file is missing or malformed.
        """
        self.path = Path(path) if isinstance(path, str) else path
        self.encoding = encoding
        super().__init__([self._parse(item, n) for n, item in self._read_items()])
        logger.info(
            f"Loaded {len(self)} records",
            extra={"path": str(self.path)},
        )

    def _read_items(self) -> list[tuple[int, Any]]:
        """Return ``(position, raw item)`` pairs from the file."""
        if not self.path.is_file():
            raise DocumentError(
                f"Record file not found: {self.path}",
                code=ErrorCode.DOCUMENT_NOT_FOUND,
                details={"path": str(self.path)},
            )

        try:
            content = self.path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentError(
                f"Failed to read record file: {self.path}",
                code=ErrorCode.DOCUMENT_PARSE_ERROR,
                details={"path": str(self.path), "error": str(e)},
            ) from e

        try:
            if self.path.suffix.lower() in self.LINE_DELIMITED_EXTENSIONS:
                return [
                    (n, json.loads(line))
                    for n, line in enumerate(content.splitlines(), start=1)
                    if line.strip()
                ]
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise DocumentError(
                f"Invalid JSON in record file: {self.path}",
                code=ErrorCode.DOCUMENT_PARSE_ERROR,
                details={"path": str(self.path), "error": str(e)},
            ) from e

        if not isinstance(data, list):
            raise DocumentError(
                "Record file must contain a JSON array",
                code=ErrorCode.DOCUMENT_PARSE_ERROR,
                details={"path": str(self.path)},
            )
        return list(enumerate(data, start=1))

    def _parse(self, item: Any, position: int) -> MeetingRecord:
        if isinstance(item, dict):
            item = _unwrap_extended_json(item)
        try:
            return MeetingRecord.model_validate(item)
        except PydanticValidationError as e:
            raise DocumentError(
                f"Invalid record at position {position}",
                code=ErrorCode.DOCUMENT_PARSE_ERROR,
                details={"path": str(self.path), "position": position, "error": str(e)},
            ) from e
