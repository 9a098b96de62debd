"""
Error taxonomy — every failure kiln knows how to report.

Each error carries the phase it belongs to and the process exit code the
CLI uses for it, so a failed run always tells the user *where* it broke:

    ConfigError                 config           3   fatal, before any output
    TemplateSourceError         template source  4   fatal
    OutputDirectoryExistsError  output           5   fatal unless --force
    HookExecutionError          hook             6   always fatal
    ValidationError             answers          7   re-prompted when interactive
    TemplateError               render           8   per-entry, logged and skipped
"""

from __future__ import annotations


class KilnError(Exception):
    """Base class for all kiln errors."""

    phase = "run"
    exit_code = 1


class ConfigError(KilnError):
    """Raised when the template configuration or ignore file is invalid or missing."""

    phase = "config"
    exit_code = 3


class TemplateSourceError(KilnError):
    """Raised when a template source cannot be resolved to a local directory."""

    phase = "template source"
    exit_code = 4


class OutputDirectoryExistsError(KilnError):
    """Raised when the output directory exists and overwriting was not requested."""

    phase = "output"
    exit_code = 5

    def __init__(self, output_dir: str) -> None:
        super().__init__(
            f"Output directory already exists: {output_dir}. Use --force to overwrite."
        )
        self.output_dir = output_dir


class HookExecutionError(KilnError):
    """Raised when a hook cannot be spawned or exits with a non-zero status."""

    phase = "hook"
    exit_code = 6


class ValidationError(KilnError):
    """Raised when an answer fails validation (including secret confirmation)."""

    phase = "answers"
    exit_code = 7


class TemplateError(KilnError):
    """Raised when a template string, path or file cannot be rendered."""

    phase = "render"
    exit_code = 8


class PathCollapseError(TemplateError):
    """Raised when a path segment renders to nothing.

    A segment such as ``{% if create_dir %}hello{% endif %}`` collapses to
    an empty string when the condition is false; joining it would yield
    doubled or dangling separators.
    """

    def __init__(self, source: str, rendered: str) -> None:
        super().__init__(f"The rendered path is not valid: '{source}' -> '{rendered}'")
        self.source = source
        self.rendered = rendered
