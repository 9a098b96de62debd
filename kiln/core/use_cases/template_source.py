"""
Template source resolution — local directory or git repository.

    with resolve_template_source("https://github.com/org/template") as root:
        ...   # root is a local directory for the duration of the block

Remote sources are cloned into a temporary directory that is removed when
the block exits, whether it exits normally or by an exception.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from kiln.adapters.vcs import git
from kiln.core.errors import TemplateSourceError

logger = logging.getLogger(__name__)


@contextmanager
def resolve_template_source(source: str | Path) -> Iterator[Path]:
    """Yield a local template root for *source*.

    Raises:
        TemplateSourceError: Local path missing or not a directory, or the
            repository cannot be cloned.
    """
    text = str(source)

    if git.is_git_url(text):
        with tempfile.TemporaryDirectory(prefix="kiln-") as tmp:
            root = git.clone_repository(text, Path(tmp) / "template")
            logger.debug("Using cloned template at %s", root)
            yield root
        return

    root = Path(text).expanduser()
    if not root.exists():
        raise TemplateSourceError(f"Template path does not exist: {root}")
    if not root.is_dir():
        raise TemplateSourceError(f"Template path is not a directory: {root}")
    logger.debug("Using local template at %s", root.resolve())
    yield root.resolve()
