"""
Tests for observability — log level resolution and handler setup.
"""

import logging
from pathlib import Path

import pytest

from kiln.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    ENV_LOG_LEVEL,
    LogSettings,
    _parse_level,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


# ── Level resolution ────────────────────────────────────────────────


class TestLogSettings:
    def test_default(self):
        assert LogSettings.from_flags(environ={}).level == "WARNING"

    def test_env_level(self):
        assert LogSettings.from_flags(environ={ENV_LOG_LEVEL: "INFO"}).level == "INFO"

    @pytest.mark.parametrize(
        "flags, expected",
        [
            ({"debug": True, "verbose": True, "quiet": True}, "DEBUG"),
            ({"verbose": True, "quiet": True}, "INFO"),
            ({"quiet": True}, "ERROR"),
        ],
    )
    def test_flags_beat_env(self, flags, expected):
        settings = LogSettings.from_flags(environ={ENV_LOG_LEVEL: "CRITICAL"}, **flags)
        assert settings.level == expected

    def test_file_settings(self):
        settings = LogSettings.from_flags(environ={ENV_LOG_FILE: "/tmp/kiln.log", ENV_LOG_FILE_LEVEL: "DEBUG"})
        assert settings.log_file == "/tmp/kiln.log"
        assert settings.log_file_level == "DEBUG"

    def test_empty_env_values_ignored(self):
        settings = LogSettings.from_flags(environ={ENV_LOG_LEVEL: "", ENV_LOG_FILE: ""})
        assert settings.level == "WARNING"
        assert settings.log_file is None


class TestParseLevel:
    @pytest.mark.parametrize(
        "name, expected",
        [("debug", logging.DEBUG), ("INFO", logging.INFO), ("Error", logging.ERROR), (None, logging.WARNING)],
    )
    def test_known(self, name, expected):
        assert _parse_level(name) == expected

    def test_unknown_falls_back(self):
        assert _parse_level("LOUD") == logging.WARNING

    def test_non_level_attribute(self):
        assert _parse_level("getLogger") == logging.WARNING


# ── Handlers ────────────────────────────────────────────────────────


class TestSetupLogging:
    def test_console_only(self, restore_root_logger):
        setup_logging("INFO")
        root = restore_root_logger
        assert len(root.handlers) == 1
        assert root.level == logging.INFO
        assert root.handlers[0].level == logging.INFO

    def test_replaces_previous_handlers(self, restore_root_logger):
        setup_logging("INFO")
        setup_logging("ERROR")
        assert len(restore_root_logger.handlers) == 1

    def test_file_handler_receives_detail(self, restore_root_logger, tmp_path: Path):
        log_file = tmp_path / "kiln.log"
        setup_logging("ERROR", log_file=str(log_file), log_file_level="DEBUG")

        root = restore_root_logger
        assert root.level == logging.DEBUG
        logging.getLogger("kiln.test").debug("detail line")
        for handler in root.handlers:
            handler.flush()

        content = log_file.read_text()
        assert "detail line" in content
        assert "kiln.test" in content

    def test_file_level_defaults_to_console(self, restore_root_logger, tmp_path: Path):
        setup_logging("WARNING", log_file=str(tmp_path / "kiln.log"))
        file_handlers = [h for h in restore_root_logger.handlers if isinstance(h, logging.FileHandler)]
        assert file_handlers[0].level == logging.WARNING

    def test_leaves_library_loggers_alone(self, restore_root_logger):
        library = logging.getLogger("jinja2")
        before = library.level
        setup_logging("INFO")
        assert library.level == before
