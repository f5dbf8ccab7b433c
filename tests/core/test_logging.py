"""Tests for structured logging configuration."""

import json

import pytest


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        """get_logger returns a bound logger."""
        from knimesql.core.logging import get_logger

        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "warning")
        assert hasattr(logger, "bind")

    def test_json_output_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """JSON logs land on stderr so stdout stays clean for SQL."""
        from knimesql.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        get_logger("test").info("test message", key="value")

        captured = capsys.readouterr()
        assert captured.out == ""
        data = json.loads(captured.err.strip().split("\n")[-1])
        assert data["event"] == "test message"
        assert data["key"] == "value"
        assert data["level"] == "info"
        assert "_record" not in data

    def test_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Console mode is human-readable."""
        from knimesql.core.logging import configure_logging, get_logger

        configure_logging(json_output=False)
        get_logger("test").info("test message", key="value")

        captured = capsys.readouterr()
        assert "test message" in captured.err
        assert "key=value" in captured.err

    def test_level_filters_records(self, capsys: pytest.CaptureFixture[str]) -> None:
        from knimesql.core.logging import configure_logging, get_logger

        configure_logging(json_output=True, level="WARNING")
        logger = get_logger("test")
        logger.info("hidden")
        logger.warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_stdlib_logging_uses_same_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        """stdlib loggers are rendered through the structlog chain."""
        import logging

        from knimesql.core.logging import configure_logging

        configure_logging(json_output=True)
        logging.getLogger("plain").warning("from stdlib")

        data = json.loads(capsys.readouterr().err.strip().split("\n")[-1])
        assert data["event"] == "from stdlib"

    def test_node_context_binds_node_fields(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Events inside node_context carry the node id and factory; events after it do not."""
        from knimesql.core.logging import configure_logging, get_logger, node_context

        configure_logging(json_output=True)
        logger = get_logger("test")
        with node_context(7, "org.knime.SorterNodeFactory"):
            logger.warning("inside")
        logger.warning("outside")

        inside, outside = (json.loads(line) for line in capsys.readouterr().err.strip().split("\n")[-2:])
        assert inside["node_id"] == 7
        assert inside["node_factory"] == "org.knime.SorterNodeFactory"
        assert "node_id" not in outside
