"""Tests for the reindex script."""

import json
import tomllib
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from pydantic import SecretStr

from meeting_search.config import QdrantSettings
from meeting_search.context import SearchContext
from meeting_search.indexing.models import ReindexReport
from meeting_search.vectorstore.service import QdrantVectorStore
from scripts import reindex

from conftest import BagOfWordsEmbeddingService

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def records_file(tmp_path: Path) -> Path:
    path = tmp_path / "meetings.json"
    path.write_text(
        json.dumps(
            [
                {"id": "m1", "title": "Q3 Planning", "body": "roadmap and budget"},
                {"id": "m2", "title": "Empty", "body": ""},
            ]
        )
    )
    return path


class TestPrepareCollection:
    """Tests for collection preparation."""

    def _context(self, exists: bool) -> tuple[SearchContext, QdrantVectorStore]:
        store = QdrantVectorStore(
            settings=QdrantSettings(api_key=SecretStr("test-key")),
            client=AsyncMock(),
        )
        store.collection_exists = AsyncMock(return_value=exists)  # type: ignore[method-assign]
        store.create_collection = AsyncMock()  # type: ignore[method-assign]
        store.delete_collection = AsyncMock()  # type: ignore[method-assign]
        return SearchContext(BagOfWordsEmbeddingService(dimensions=8), store), store

    async def test_creates_missing_collection(self) -> None:
        context, store = self._context(exists=False)

        await reindex.prepare_collection(context, recreate=False)

        store.create_collection.assert_awaited_once_with(8)
        store.delete_collection.assert_not_awaited()

    async def test_recreate_drops_existing(self) -> None:
        context, store = self._context(exists=True)

        await reindex.prepare_collection(context, recreate=True)

        store.delete_collection.assert_awaited_once()
        store.create_collection.assert_awaited_once_with(8)

    async def test_keeps_existing_collection(self) -> None:
        context, store = self._context(exists=True)

        await reindex.prepare_collection(context, recreate=False)

        store.delete_collection.assert_not_awaited()
        store.create_collection.assert_not_awaited()


class TestRunReindex:
    """Tests for the reindex run."""

    async def test_writes_report(
        self,
        records_file: Path,
        search_context: SearchContext,
        tmp_path: Path,
    ) -> None:
        output = tmp_path / "report.json"

        with patch.object(SearchContext, "from_settings", return_value=search_context):
            report = await reindex.run_reindex(records_file, output_path=output)

        assert report == ReindexReport(total=2, processed=1, indexed=1, skipped=1)
        assert json.loads(output.read_text())["indexed"] == 1


class TestMain:
    """Tests for the command-line entry point."""

    def test_exit_code_on_failures(self, records_file: Path) -> None:
        report = ReindexReport(total=2, processed=1, failed=1, skipped=1)

        with (
            patch("sys.argv", ["reindex", "--records", str(records_file)]),
            patch.object(reindex, "run_reindex", AsyncMock(return_value=report)),
            pytest.raises(SystemExit) as exc_info,
        ):
            reindex.main()

        assert exc_info.value.code == 1

    def test_exit_code_on_missing_records_file(self, tmp_path: Path) -> None:
        with (
            patch("sys.argv", ["reindex", "--records", str(tmp_path / "missing.json")]),
            pytest.raises(SystemExit) as exc_info,
        ):
            reindex.main()

        assert exc_info.value.code == 2


class TestPackaging:
    """The operator scripts run from a checkout and stay out of the wheel."""

    def test_wheel_ships_only_the_library(self) -> None:
        pyproject = tomllib.loads((PROJECT_ROOT / "pyproject.toml").read_text())

        assert pyproject["tool"]["hatch"]["build"]["targets"]["wheel"]["packages"] == [
            "meeting_search"
        ]
        assert "scripts" not in pyproject["project"]

    def test_scripts_directory_is_not_a_package(self) -> None:
        assert not (PROJECT_ROOT / "scripts" / "__init__.py").exists()
