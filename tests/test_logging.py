"""Tests for logging configuration."""

import json
import logging
import sys
from unittest.mock import patch

from factrag.config import Environment, Settings
from factrag.logging_config import (
    DevFormatter,
    JSONFormatter,
    get_logger,
    setup_logging,
)


def _record(msg: str = "Point upserted", level: int = logging.INFO, **extra: object):
    record = logging.LogRecord(
        name="factrag.ingestion",
        level=level,
        pathname="/app/factrag/ingestion/service.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_format_basic_message(self) -> None:
        """Basic fields are present."""
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "factrag.ingestion"
        assert data["message"] == "Point upserted"
        assert data["file"] == "/app/factrag/ingestion/service.py:42"
        assert "timestamp" in data
        assert "extra" not in data

    def test_extra_fields_are_kept(self) -> None:
        """Fields passed through extra= end up under "extra"."""
        record = _record(collection="facts", dimensions=1536)
        data = json.loads(JSONFormatter().format(record))

        assert data["extra"] == {"collection": "facts", "dimensions": 1536}

    def test_format_with_exception(self) -> None:
        """Exception info is included in output."""
        try:
            raise ValueError("test error")
        except ValueError:
            exc_info = sys.exc_info()

        record = _record("Upsert failed", logging.ERROR)
        record.exc_info = exc_info
        data = json.loads(JSONFormatter().format(record))

        assert "ValueError" in data["exception"]


class TestDevFormatter:
    """Tests for development formatter."""

    def test_format_includes_level(self) -> None:
        """Development format includes level, logger and message."""
        output = DevFormatter().format(_record("Warning message", logging.WARNING))

        assert "WARNING" in output
        assert "factrag.ingestion" in output
        assert "Warning message" in output

    def test_extra_fields_appended(self) -> None:
        """Extra fields are appended as sorted key=value pairs."""
        output = DevFormatter().format(_record(collection="facts", b=2))

        assert output.endswith("| b=2 collection=facts")


class TestSetupLogging:
    """Tests for logging setup."""

    def test_returns_root_logger(self) -> None:
        """setup_logging returns root logger."""
        logger = setup_logging(level="INFO", json_output=False)
        assert logger is logging.getLogger()

    def test_uses_json_in_production(self) -> None:
        """JSON output is used in production environment."""
        mock_settings = Settings(environment=Environment.PRODUCTION)

        with patch("factrag.logging_config.get_settings", return_value=mock_settings):
            setup_logging()

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_uses_dev_formatter_in_development(self) -> None:
        """Dev formatter is used in development environment."""
        mock_settings = Settings(environment=Environment.DEVELOPMENT)

        with patch("factrag.logging_config.get_settings", return_value=mock_settings):
            setup_logging()

        root = logging.getLogger()
        assert isinstance(root.handlers[0].formatter, DevFormatter)

    def test_level_override(self) -> None:
        """Log level can be overridden."""
        setup_logging(level="DEBUG", json_output=False)
        assert logging.getLogger().level == logging.DEBUG

    def test_quiets_http_loggers(self) -> None:
        """HTTP client loggers only report warnings."""
        setup_logging(level="DEBUG", json_output=False)
        assert logging.getLogger("httpx").level == logging.WARNING


class TestGetLogger:
    """Tests for named logger retrieval."""

    def test_returns_named_logger(self) -> None:
        """get_logger returns a logger with the given name."""
        assert get_logger("factrag.rag").name == "factrag.rag"
