"""
Tests for Config validation and component logging.
"""

import json
import logging
from unittest.mock import patch

import pytest

from jobboard.common.config import Config
from jobboard.common.logger import JsonFormatter, get_logger, setup_logging


class TestConfigValidate:

    def test_requires_mongodb_uri(self):
        with patch.object(Config, "MONGODB_URI", ""):
            with pytest.raises(ValueError, match="MONGODB_URI"):
                Config.validate()

    def test_production_requires_encryption_key(self):
        with patch.object(Config, "MONGODB_URI", "mongodb://db"), \
             patch.object(Config, "ENVIRONMENT", "production"), \
             patch.object(Config, "TOTP_ENCRYPTION_KEY", ""):
            with pytest.raises(ValueError, match="TOTP_ENCRYPTION_KEY"):
                Config.validate()

    def test_rejects_unknown_log_format(self):
        with patch.object(Config, "MONGODB_URI", "mongodb://db"), \
             patch.object(Config, "LOG_FORMAT", "xml"):
            with pytest.raises(ValueError, match="LOG_FORMAT"):
                Config.validate()

    def test_valid_development_config(self):
        with patch.object(Config, "MONGODB_URI", "mongodb://db"), \
             patch.object(Config, "ENVIRONMENT", "development"), \
             patch.object(Config, "LOG_FORMAT", "simple"):
            Config.validate()

    def test_summary_hides_secrets(self):
        with patch.object(Config, "MONGODB_URI", "mongodb://user:hunter2@db"):
            summary = Config.summary()

        assert "hunter2" not in summary
        assert "MongoDB: ✓ Configured" in summary


class TestComponentLogger:

    def test_prefixes_component(self, caplog):
        logger = get_logger("jobboard.test", component="cache")

        with caplog.at_level(logging.INFO, logger="jobboard.test"):
            logger.info("warmed")

        assert "[cache] warmed" in caplog.text
        assert caplog.records[0].component == "cache"

    def test_without_component_leaves_message(self, caplog):
        logger = get_logger("jobboard.test.plain")

        with caplog.at_level(logging.INFO, logger="jobboard.test.plain"):
            logger.info("plain")

        assert caplog.records[0].getMessage() == "plain"


class TestJsonFormatter:

    def _record(self, message, **extra):
        record = logging.LogRecord("jobboard.repo", logging.ERROR, __file__, 1, message, None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_quotes_in_message_stay_valid_json(self):
        line = JsonFormatter().format(self._record('Failed to prepare "SSC GD": title missing'))

        payload = json.loads(line)
        assert payload["message"] == 'Failed to prepare "SSC GD": title missing'
        assert payload["level"] == "ERROR"
        assert payload["name"] == "jobboard.repo"

    def test_component_included(self):
        payload = json.loads(JsonFormatter().format(self._record("x", component="api")))

        assert payload["component"] == "api"

    def test_setup_logging_installs_json_handler(self):
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        try:
            setup_logging(level="WARNING", format="json")
            assert isinstance(root.handlers[-1].formatter, JsonFormatter)
            assert root.level == logging.WARNING
        finally:
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])
