"""
Logging setup for the kiln CLI.

``main.py`` calls :func:`setup_logging` once per process; every other module
only does ``logger = logging.getLogger(__name__)``.

Console level, highest precedence first:

    --debug (DEBUG)  >  --verbose (INFO)  >  --quiet (ERROR)
        >  KILN_LOG_LEVEL  >  WARNING

A second, always-detailed sink can be attached with KILN_LOG_FILE
(level from KILN_LOG_FILE_LEVEL, defaulting to the console level).
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass

ENV_LOG_LEVEL = "KILN_LOG_LEVEL"
ENV_LOG_FILE = "KILN_LOG_FILE"
ENV_LOG_FILE_LEVEL = "KILN_LOG_FILE_LEVEL"

# ── Formats ─────────────────────────────────────────────────────

# WARNING and above: operation lines only
_CONSOLE_PLAIN = ("%(message)s", None)
# INFO: which module said it, and when
_CONSOLE_INFO = ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S")
# DEBUG: where it was said
_CONSOLE_DEBUG = ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S")
_FILE = ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%Y-%m-%d %H:%M:%S")


@dataclass
class LogSettings:
    """Resolved logging settings for one process."""

    level: str = "WARNING"
    log_file: str | None = None
    log_file_level: str | None = None

    @classmethod
    def from_flags(
        cls,
        debug: bool = False,
        verbose: bool = False,
        quiet: bool = False,
        environ: dict[str, str] | None = None,
    ) -> LogSettings:
        env = os.environ if environ is None else environ
        if debug:
            level = "DEBUG"
        elif verbose:
            level = "INFO"
        elif quiet:
            level = "ERROR"
        else:
            level = env.get(ENV_LOG_LEVEL) or "WARNING"
        return cls(
            level=level,
            log_file=env.get(ENV_LOG_FILE) or None,
            log_file_level=env.get(ENV_LOG_FILE_LEVEL) or None,
        )


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Install console (stderr) and optional file handlers on the root logger.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of a log file that receives full-detail records.
        log_file_level: Level for the file handler; defaults to ``level``.
    """
    console_level = _parse_level(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_handler(logging.StreamHandler(sys.stderr), console_level, _console_format(console_level)))

    root_level = console_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        root.addHandler(_handler(logging.FileHandler(log_file, encoding="utf-8"), file_level, _FILE))
        root_level = min(root_level, file_level)
    root.setLevel(root_level)

    logging.raiseExceptions = False


def _console_format(level: int) -> tuple[str, str | None]:
    if level <= logging.DEBUG:
        return _CONSOLE_DEBUG
    if level <= logging.INFO:
        return _CONSOLE_INFO
    return _CONSOLE_PLAIN


def _handler(handler: logging.Handler, level: int, fmt: tuple[str, str | None]) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt[0], datefmt=fmt[1]))
    return handler


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric value, WARNING when unknown."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
