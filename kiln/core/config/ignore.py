"""
Ignore matcher — which template entries are never materialized.

Patterns are shell-style globs (``fnmatch``) matched against an entry's
path relative to the template root, always with ``/`` separators:

    .git/**         anything under .git
    **/.DS_Store    .DS_Store at any depth, including the root
    build/          the build directory and everything under it

The built-in patterns always apply; ``.kilnignore`` can only add to them.
"""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path, PurePath

from kiln.core.config.loader import CONFIG_FILES, HOOKS_DIR
from kiln.core.errors import ConfigError

logger = logging.getLogger(__name__)

IGNORE_FILE = ".kilnignore"

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    ".git",
    ".git/**",
    ".hg",
    ".hg/**",
    ".svn",
    ".svn/**",
    "**/.DS_Store",
    *CONFIG_FILES,
    IGNORE_FILE,
    HOOKS_DIR,
    f"{HOOKS_DIR}/**",
)


class IgnoreMatcher:
    """Compiled predicate over template-relative paths."""

    def __init__(self, patterns: list[str] | tuple[str, ...] = ()) -> None:
        self.user_patterns = [p for p in (_normalize(p) for p in patterns) if p]
        self._globs = _expand(DEFAULT_IGNORE_PATTERNS) + _expand(self.user_patterns)

    @property
    def patterns(self) -> list[str]:
        return list(DEFAULT_IGNORE_PATTERNS) + self.user_patterns

    def matches(self, relative_path: str | PurePath) -> bool:
        path = PurePath(relative_path).as_posix()
        if path in ("", "."):
            return False
        return any(fnmatch.fnmatchcase(path, glob) for glob in self._globs)

    def __repr__(self) -> str:
        return f"IgnoreMatcher(user_patterns={self.user_patterns!r})"


def parse_ignore_text(text: str) -> list[str]:
    """Patterns from ignore-file text; blank and ``#`` lines dropped."""
    patterns = []
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


def load_ignore_matcher(template_dir: Path) -> IgnoreMatcher:
    """Build the matcher for a template root.

    Raises:
        ConfigError: If ``.kilnignore`` exists but cannot be read.
    """
    path = template_dir / IGNORE_FILE
    if not path.is_file():
        logger.debug("%s does not exist, using built-in patterns only", IGNORE_FILE)
        return IgnoreMatcher()

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    patterns = parse_ignore_text(text)
    logger.debug("Loaded %d ignore pattern(s) from %s", len(patterns), path)
    return IgnoreMatcher(patterns)


def _normalize(pattern: str) -> str:
    pattern = pattern.strip().replace("\\", "/")
    while pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern.lstrip("/")


def _expand(patterns) -> list[str]:
    """Turn declared patterns into the plain globs actually tested."""
    globs: list[str] = []
    for pattern in patterns:
        if pattern.endswith("/"):
            # Directory pattern: the directory and its contents
            base = pattern.rstrip("/")
            if not base:
                continue
            candidates = [base, f"{base}/**"]
        else:
            candidates = [pattern]
        for glob in candidates:
            globs.append(glob)
            if glob.startswith("**/"):
                globs.append(glob[3:])
    return globs
