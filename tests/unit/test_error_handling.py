"""
Tests for error handling helpers.
"""

import logging

import pytest

from jobboard.common.error_handling import ErrorCollector, read_operation, safe_execute


class _Reader:
    def __init__(self, fail_open=True):
        self.fail_open = fail_open

    @read_operation("listThings", fallback=list)
    def list_things(self, fail=False):
        if fail:
            raise ConnectionError("unreachable")
        return ["thing"]


class TestReadOperation:
    """Tests for the fail-open read decorator."""

    def test_passes_result_through(self):
        assert _Reader().list_things() == ["thing"]

    def test_fail_open_returns_fallback_and_logs(self, caplog):
        with caplog.at_level(logging.ERROR):
            assert _Reader().list_things(fail=True) == []

        assert "[MongoDB] listThings error: unreachable" in caplog.text

    def test_fail_fast_reraises(self):
        with pytest.raises(ConnectionError):
            _Reader(fail_open=False).list_things(fail=True)

    def test_preserves_metadata(self):
        assert _Reader.list_things.__name__ == "list_things"


class TestSafeExecute:

    def test_returns_result(self):
        assert safe_execute(lambda x: x * 2, 21) == 42

    def test_returns_fallback_on_error(self, caplog):
        def boom():
            raise RuntimeError("nope")

        with caplog.at_level(logging.WARNING):
            assert safe_execute(boom, operation_name="incrementViewCount", fallback=0) == 0

        assert "[incrementViewCount] Failed: nope" in caplog.text


class TestErrorCollector:

    def test_collects_messages(self):
        collector = ErrorCollector()
        assert not collector

        collector.add("Invalid ID: x")
        collector.add_exception("Batch insert error", ValueError("bad"))

        assert len(collector) == 2
        assert collector.errors == ["Invalid ID: x", "Batch insert error: bad"]
