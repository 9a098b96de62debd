"""
Hook adapter — run a template's pre/post generation scripts.

A hook is an executable file in the template's ``hooks/`` directory:

    hooks/pre_gen_project    runs before answers are resolved; its stdout,
                             if it is a JSON object, supplies answers
    hooks/post_gen_project   runs after the output tree is written

Each hook receives one JSON document on stdin:

    {"template_dir": "...", "output_dir": "...", "answers": {...} | null}

A hook that cannot be started or exits non-zero aborts the run.  Output a
hook prints and kiln does not capture goes to stderr.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kiln.core.config.loader import HOOKS_DIR, POST_GEN_HOOK, PRE_GEN_HOOK
from kiln.core.errors import HookExecutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HookPaths:
    pre: Path
    post: Path

    def existing(self) -> list[Path]:
        return [p for p in (self.pre, self.post) if p.exists()]


def get_hook_paths(template_dir: Path) -> HookPaths:
    hooks = template_dir / HOOKS_DIR
    return HookPaths(pre=hooks / PRE_GEN_HOOK, post=hooks / POST_GEN_HOOK)


def is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def build_hook_payload(template_dir: Path, output_dir: Path, answers: dict[str, Any] | None) -> str:
    """JSON document written to a hook's stdin."""
    return json.dumps(
        {
            "template_dir": str(Path(template_dir).resolve()),
            "output_dir": str(Path(output_dir).resolve()),
            "answers": answers,
        }
    )


def run_hook(
    script: Path,
    template_dir: Path,
    output_dir: Path,
    answers: dict[str, Any] | None,
    capture_output: bool = False,
    timeout: float | None = None,
) -> str | None:
    """Run one hook script.

    Args:
        script: Path to the hook; a missing file is a no-op.
        template_dir: Template root passed in the payload.
        output_dir: Output root passed in the payload.
        answers: Resolved answers, or None for the pre-generation hook.
        capture_output: Return the hook's stdout; otherwise it is
            sent to stderr.
        timeout: Seconds before the hook is killed; None waits forever.

    Returns:
        Captured stdout when *capture_output*, else None.

    Raises:
        HookExecutionError: The hook could not be started, timed out, or
            exited non-zero.
    """
    if not script.exists():
        logger.debug("No hook at %s", script)
        return None

    payload = build_hook_payload(template_dir, output_dir, answers)
    logger.info("Running hook %s", script.name)

    try:
        result = subprocess.run(
            [str(script)],
            input=payload,
            stdout=subprocess.PIPE if capture_output else sys.stderr,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise HookExecutionError(f"Hook {script.name} timed out after {timeout}s") from e
    except OSError as e:
        raise HookExecutionError(f"Failed to run hook {script}: {e}") from e

    if result.returncode != 0:
        raise HookExecutionError(f"Hook {script.name} failed with exit code {result.returncode}")

    logger.debug("Hook %s finished", script.name)
    return result.stdout if capture_output else None

