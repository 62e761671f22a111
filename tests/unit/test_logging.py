"""Unit tests for logging setup and formatters."""

import io
import json
import logging
from collections.abc import Iterator

import pytest

from reposcribe.utils.logging import (
    ROOT_LOGGER_NAME,
    HumanFormatter,
    JSONFormatter,
    LogMode,
    ReposcribeLogger,
    configure_from_config,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


def make_record(msg: str = "hello", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("reposcribe.test", level, __file__, 1, msg, (), None)


class TestFormatters:
    """Tests for log formatters."""

    def test_human_format(self) -> None:
        """Test human format without colors."""
        assert HumanFormatter(use_colors=False).format(make_record()) == "[INFO] hello"

    def test_human_format_colored(self) -> None:
        """Test colored output wraps the level prefix."""
        output = HumanFormatter(use_colors=True).format(make_record(level=logging.ERROR))

        assert output.startswith("\033[31m[ERROR]")
        assert output.endswith(" hello")

    def test_json_format(self) -> None:
        """Test JSON lines carry level, logger and message."""
        data = json.loads(JSONFormatter().format(make_record("done")))

        assert data["level"] == "INFO"
        assert data["logger"] == "reposcribe.test"
        assert data["msg"] == "done"
        assert data["ts"].endswith("+00:00")

    def test_json_includes_extra_data(self) -> None:
        """Test structured fields are merged into the JSON object."""
        record = make_record()
        record.extra_data = {"ref": "octo/shop@main", "files": 3}

        data = json.loads(JSONFormatter().format(record))

        assert data["ref"] == "octo/shop@main"
        assert data["files"] == 3


class TestSetup:
    """Tests for logger configuration."""

    def test_get_logger_class(self) -> None:
        """Test package loggers support structured logging."""
        assert isinstance(get_logger("reposcribe.utils.test_logger"), ReposcribeLogger)

    def test_structured_json_output(self) -> None:
        """Test structured records reach the JSON handler."""
        stream = io.StringIO()
        setup_logging(mode=LogMode.JSON, level=logging.DEBUG, stream=stream)

        get_logger("reposcribe.utils.test_logger").structured(
            logging.WARNING, "Sections missing", missing_fields=["architecture_notes"]
        )

        data = json.loads(stream.getvalue().strip())
        assert data["msg"] == "Sections missing"
        assert data["missing_fields"] == ["architecture_notes"]

    def test_structured_respects_level(self) -> None:
        """Test records below the level are dropped."""
        stream = io.StringIO()
        setup_logging(mode=LogMode.JSON, level=logging.WARNING, stream=stream)

        get_logger("reposcribe.utils.test_logger").structured(logging.INFO, "ignored", a=1)

        assert stream.getvalue() == ""

    def test_setup_replaces_handlers(self) -> None:
        """Test repeated setup installs a single handler."""
        setup_logging(stream=io.StringIO())
        setup_logging(stream=io.StringIO())

        assert len(logging.getLogger(ROOT_LOGGER_NAME).handlers) == 1

    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            ("INFO", logging.INFO),
            ("debug", logging.DEBUG),
            ("WARNING", logging.WARNING),
        ],
    )
    def test_configure_from_config_levels(self, level: str, expected: int) -> None:
        """Test level names from config map to logging levels."""
        configure_from_config("human", level, stream=io.StringIO())

        assert logging.getLogger(ROOT_LOGGER_NAME).level == expected

    def test_configure_from_config(self) -> None:
        """Test the logging config section selects mode and level."""
        configure_from_config("json", "error", stream=io.StringIO())

        logger = logging.getLogger(ROOT_LOGGER_NAME)
        assert logger.level == logging.ERROR
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
