"""
Git adapter — fetch remote templates.

Uses the git CLI, never a library binding.  Only what template resolution
needs: recognizing a repository URL and shallow-cloning it.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from pathlib import Path

from kiln.core.errors import TemplateSourceError

logger = logging.getLogger(__name__)

_URL_PREFIXES = ("https://", "http://", "git://", "ssh://", "file://", "git@")
# user@host:path (scp-like ssh syntax)
_SCP_LIKE = re.compile(r"^[\w.-]+@[\w.-]+:.+")

DEFAULT_CLONE_TIMEOUT = 300


def is_git_url(source: str) -> bool:
    """Whether *source* names a git repository rather than a local path."""
    source = source.strip()
    if source.startswith(_URL_PREFIXES):
        return True
    if _SCP_LIKE.match(source):
        return True
    return source.endswith(".git") and not Path(source).is_dir()


def is_available() -> bool:
    return shutil.which("git") is not None


def clone_repository(url: str, dest: Path, timeout: int = DEFAULT_CLONE_TIMEOUT) -> Path:
    """Shallow-clone *url* into *dest*.

    Raises:
        TemplateSourceError: git missing, clone failed or timed out.
    """
    if not is_available():
        raise TemplateSourceError(f"Cannot clone {url}: git is not installed")

    logger.info("Cloning %s", url)
    try:
        _git(["clone", "--depth", "1", "--quiet", url, str(dest)], timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise TemplateSourceError(f"Cloning {url} timed out after {timeout}s") from e
    except RuntimeError as e:
        raise TemplateSourceError(f"Failed to clone {url}: {e}") from e
    return dest


# ── Helpers ─────────────────────────────────────────────────────


def _git(args: list[str], cwd: str | None = None, timeout: int = 30) -> str:
    """Run a git command and return stdout."""
    logger.debug("git %s", " ".join(args))
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except OSError as e:
        raise RuntimeError(str(e)) from e
    if result.returncode != 0:
        raise RuntimeError(result.stderr.strip() or f"git {args[0]} failed")
    return result.stdout
