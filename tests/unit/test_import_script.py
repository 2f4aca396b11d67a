"""
Tests for scripts/import_announcements.py.
"""

import importlib.util
import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from jobboard.common.repositories import BatchInsertResult, BulkUpsertResult

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "import_announcements.py"


@pytest.fixture(scope="module")
def importer():
    spec = importlib.util.spec_from_file_location("import_announcements", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def import_file(tmp_path):
    def _write(items):
        path = tmp_path / "announcements.json"
        path.write_text(json.dumps(items), encoding="utf-8")
        return str(path)

    return _write


class TestRunImport:

    def test_upsert_by_default(self, importer, import_file, repo, make_announcement):
        path = import_file([dict(make_announcement(), slug="up-police-2026")])

        assert importer.run_import(path, user_id="importer", repo=repo) == 0

        stored = repo.find_by_slug("up-police-2026")
        assert stored["postedBy"] == "importer"

    def test_insert_mode(self, importer, import_file, make_announcement):
        repo = MagicMock()
        repo.batch_insert.return_value = BatchInsertResult(inserted=1)
        path = import_file([make_announcement()])

        assert importer.run_import(path, insert=True, repo=repo) == 0
        repo.batch_insert.assert_called_once()
        repo.bulk_upsert.assert_not_called()

    def test_errors_exit_non_zero(self, importer, import_file, capsys):
        repo = MagicMock()
        repo.bulk_upsert.return_value = BulkUpsertResult(upserted=1, errors=["Upsert failed for x: dup"])
        path = import_file([{"title": "x", "type": "job", "slug": "x"}])

        assert importer.run_import(path, repo=repo) == 1
        assert "Upsert failed for x: dup" in capsys.readouterr().out

    def test_dry_run_validates_without_writing(self, importer, import_file, make_announcement):
        repo = MagicMock()
        path = import_file([make_announcement(), dict(make_announcement(), slug="ok-1")])

        assert importer.run_import(path, dry_run=True, repo=repo) == 1
        repo.bulk_upsert.assert_not_called()

    def test_rejects_non_array(self, importer, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"title": "x"}', encoding="utf-8")

        assert importer.main([str(path)]) == 1

    def test_ensure_indexes_before_writing(self, importer, import_file, repo, collection, make_announcement):
        path = import_file([dict(make_announcement(), slug="bpsc-tre-2026")])

        assert importer.run_import(path, repo=repo, ensure_indexes=True) == 0

        slug_index = collection.index_information()["slug"]
        assert slug_index["unique"] is True

    def test_ensure_indexes_flag_parsed(self, importer, import_file, make_announcement):
        path = import_file([dict(make_announcement(), slug="x-1")])

        with patch.object(importer, "run_import", return_value=0) as run:
            assert importer.main([path, "--ensure-indexes"]) == 0

        assert run.call_args.kwargs["ensure_indexes"] is True
