"""
Tests for database utilities (index creation, client singleton, ping retry).
"""

from unittest.mock import MagicMock, patch

import pytest
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from jobboard.common.database import (
    ANNOUNCEMENT_INDEXES,
    DatabaseClient,
    ensure_announcement_indexes,
    ensure_indexes,
)
from jobboard.common.legacy_schemas import LEGACY_INDEXES


class TestEnsureIndexes:

    def test_slug_index_is_unique(self):
        slug = [spec for spec in ANNOUNCEMENT_INDEXES if spec[0] == "slug"][0]
        assert slug[2] == {"unique": True}

    def test_creates_announcement_indexes(self):
        collection = MagicMock()

        created = ensure_announcement_indexes(collection)

        assert created == len(ANNOUNCEMENT_INDEXES)
        names = [c.kwargs["name"] for c in collection.create_index.call_args_list]
        assert names == [name for name, _, _ in ANNOUNCEMENT_INDEXES]

    def test_existing_index_conflicts_are_logged_not_raised(self):
        collection = MagicMock()
        collection.create_index.side_effect = OperationFailure("index exists with different options")

        assert ensure_announcement_indexes(collection) == 0

    def test_covers_legacy_collections(self):
        db = MagicMock()

        results = ensure_indexes(db)

        assert set(results) == {"announcements", *LEGACY_INDEXES}
        db.__getitem__.assert_any_call("admit_cards")


class TestDatabaseClient:
    """Tests for the singleton client."""

    @pytest.fixture(autouse=True)
    def reset_singleton(self):
        DatabaseClient.reset()
        yield
        DatabaseClient.reset()

    def test_requires_uri(self):
        with patch("jobboard.common.database.Config.MONGODB_URI", ""):
            with pytest.raises(ValueError, match="MONGODB_URI"):
                DatabaseClient()

    def test_singleton_and_collections(self):
        with patch("jobboard.common.database.Config.MONGODB_URI", "mongodb://localhost/jobboard"), \
             patch("jobboard.common.database.MongoClient") as mock_client:
            first = DatabaseClient()
            second = DatabaseClient()

            assert first is second
            mock_client.assert_called_once()

            db = mock_client.return_value.get_database.return_value
            first.announcements
            db.__getitem__.assert_called_with("announcements")
            first.admit_cards
            db.__getitem__.assert_called_with("admit_cards")

    def test_ping_retries_then_succeeds(self):
        with patch("jobboard.common.database.Config.MONGODB_URI", "mongodb://localhost"), \
             patch("jobboard.common.database.MongoClient") as mock_client:
            db = mock_client.return_value.get_database.return_value
            db.command.side_effect = [ServerSelectionTimeoutError("down"), {"ok": 1}]

            client = DatabaseClient()
            with patch.object(DatabaseClient.ping.retry, "sleep"):
                assert client.ping() is True

            assert db.command.call_count == 2

    def test_ping_gives_up_after_three_attempts(self):
        with patch("jobboard.common.database.Config.MONGODB_URI", "mongodb://localhost"), \
             patch("jobboard.common.database.MongoClient") as mock_client:
            db = mock_client.return_value.get_database.return_value
            db.command.side_effect = ServerSelectionTimeoutError("down")

            client = DatabaseClient()
            with patch.object(DatabaseClient.ping.retry, "sleep"):
                with pytest.raises(ServerSelectionTimeoutError):
                    client.ping()

            assert db.command.call_count == 3
