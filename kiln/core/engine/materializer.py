"""
Materializer — turns a template tree into the output tree.

Two separate steps per template entry:

    decide   TemplateProcessor.process(entry)  → FileOperation   (no writes)
    execute  OperationExecutor.execute(op)     → OperationOutcome

The walk visits entries depth-first in sorted name order, parents before
children.  A failure is recorded against its entry and the walk moves on;
the subtree of an ignored or failed directory is not visited.  An output
root that lies inside the template root is reported as ignored.

Flow:
    walk → ignore? → render segments → validate → target path → operation
         → conflict policy → filesystem
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any

from kiln.core.config.ignore import IgnoreMatcher
from kiln.core.errors import PathCollapseError, TemplateError
from kiln.core.models.operation import (
    CopyOperation,
    CreateDirectoryOperation,
    FileOperation,
    IgnoreOperation,
    OperationOutcome,
    WriteOperation,
)
from kiln.core.models.question import DEFAULT_TEMPLATE_SUFFIX
from kiln.core.services.prompts import DefaultsPrompter, Prompter
from kiln.core.services.renderer import TemplateRenderer

logger = logging.getLogger(__name__)


class ConflictPolicy(str, Enum):
    """What to do when a file target already exists."""

    PROMPT = "prompt"
    OVERWRITE = "overwrite"
    SKIP = "skip"


# ── Decision ────────────────────────────────────────────────────


class TemplateProcessor:
    """Decides the operation for each template entry."""

    def __init__(
        self,
        renderer: TemplateRenderer,
        template_root: Path,
        output_root: Path,
        answers: dict[str, Any],
        ignore: IgnoreMatcher | None = None,
        template_suffix: str = DEFAULT_TEMPLATE_SUFFIX,
    ) -> None:
        self.renderer = renderer
        self.template_root = Path(template_root)
        self.output_root = Path(output_root)
        self.resolved_output_root = self.output_root.resolve()
        self.answers = answers
        self.ignore = ignore or IgnoreMatcher()
        self.template_suffix = template_suffix

    def relative(self, entry: Path) -> PurePosixPath:
        return PurePosixPath(Path(entry).relative_to(self.template_root).as_posix())

    def is_template_file(self, name: str) -> bool:
        return name.endswith(self.template_suffix)

    def render_segments(self, relative: PurePosixPath) -> list[str]:
        """Render each segment of *relative*; the result has no empty parts.

        A rendered segment may itself contain ``/`` and expand into several
        parts, as long as none of them is empty.

        Raises:
            PathCollapseError: A non-empty segment rendered to nothing.
            TemplateError: A segment failed to render.
        """
        parts: list[str] = []
        for segment in relative.parts:
            rendered = self.renderer.render(segment, self.answers)
            pieces = rendered.split("/")
            if not rendered.strip() or any(not p.strip() or p in (".", "..") for p in pieces):
                raise PathCollapseError(str(relative), _join_rendered(relative.parts, segment, rendered))
            parts.extend(pieces)
        return parts

    def process(self, entry: Path) -> FileOperation:
        """Decide what to do with one template entry.

        Raises:
            TemplateError: Path or content failed to render, or the
                rendered path is not valid.
            OSError: The entry could not be read.
        """
        entry = Path(entry)
        relative = self.relative(entry)

        if self.ignore.matches(relative):
            return IgnoreOperation(source=entry)

        # The output root may sit inside the template root
        if entry.resolve() == self.resolved_output_root:
            logger.debug("Not descending into the output directory %s", entry)
            return IgnoreOperation(source=entry)

        parts = self.render_segments(relative)
        target = self.output_root.joinpath(*parts)

        if entry.is_file():
            name = parts[-1]
            if self.is_template_file(name):
                stripped = name[: -len(self.template_suffix)]
                if not stripped.strip():
                    raise PathCollapseError(str(relative), "/".join(parts))
                target = target.with_name(stripped)
                return WriteOperation(
                    target=target,
                    content=self.render_content(entry),
                    target_exists=target.exists(),
                    source=entry,
                )
            return CopyOperation(source=entry, target=target, target_exists=target.exists())

        if entry.is_dir():
            return CreateDirectoryOperation(target=target, target_exists=target.exists())

        raise OSError(f"Not a regular file or directory: {entry}")

    def render_content(self, entry: Path) -> str:
        try:
            with open(entry, encoding="utf-8", newline="") as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise TemplateError(f"Template file is not UTF-8 text: {entry}") from e
        try:
            return self.renderer.render(text, self.answers)
        except TemplateError as e:
            raise TemplateError(f"Failed to render {self.relative(entry)}: {e}") from e


def _join_rendered(parts: tuple[str, ...], segment: str, rendered: str) -> str:
    """The rendered path up to the offending segment, for error messages."""
    shown = []
    for part in parts:
        if part == segment:
            shown.append(rendered)
            break
        shown.append(part)
    return "/".join(shown)


# ── Execution ───────────────────────────────────────────────────


class OperationExecutor:
    """Performs operations against the output tree."""

    def __init__(self, policy: ConflictPolicy = ConflictPolicy.PROMPT, prompter: Prompter | None = None) -> None:
        self.policy = policy
        self.prompter = prompter or DefaultsPrompter()

    def should_overwrite(self, target: Path) -> bool:
        if self.policy is ConflictPolicy.OVERWRITE:
            return True
        if self.policy is ConflictPolicy.SKIP:
            return False
        return self.prompter.confirm(f"Overwrite '{target}'?", default=False)

    def execute(self, op: FileOperation) -> OperationOutcome:
        """Perform *op*.

        Raises:
            OSError: The filesystem refused the operation.
        """
        if isinstance(op, IgnoreOperation):
            return OperationOutcome(status="ignored", path=str(op.source), message=op.describe())

        if isinstance(op, CreateDirectoryOperation):
            if op.target_exists and op.target.is_dir():
                return OperationOutcome(status="skipped", path=str(op.target), message=op.describe())
            op.target.mkdir(parents=True, exist_ok=True)
            return OperationOutcome(status="created", path=str(op.target), message=op.describe())

        overwrite = True
        if op.target_exists:
            overwrite = self.should_overwrite(op.target)
        if not overwrite:
            return OperationOutcome(status="skipped", path=str(op.target), message=op.describe(overwrite=False))

        op.target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(op, CopyOperation):
            shutil.copy2(op.source, op.target)
        else:
            with open(op.target, "w", encoding="utf-8", newline="") as f:
                f.write(op.content)
            if op.source is not None:
                shutil.copymode(op.source, op.target)

        status = "overwritten" if op.target_exists else "created"
        return OperationOutcome(status=status, path=str(op.target), message=op.describe())


# ── Walk ────────────────────────────────────────────────────────


@dataclass
class MaterializationReport:
    """Every outcome of one materialization, in walk order."""

    outcomes: list[OperationOutcome] = field(default_factory=list)

    def add(self, outcome: OperationOutcome) -> None:
        self.outcomes.append(outcome)

    def count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def failed(self) -> int:
        return self.count("failed")

    @property
    def failures(self) -> list[OperationOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def status(self) -> str:
        if self.failed == 0:
            return "ok"
        if self.failed < self.total:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "total": self.total,
            "created": self.count("created"),
            "overwritten": self.count("overwritten"),
            "skipped": self.count("skipped"),
            "ignored": self.count("ignored"),
            "failed": self.failed,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


def process_entry(
    entry: Path,
    processor: TemplateProcessor,
    executor: OperationExecutor,
) -> tuple[OperationOutcome, FileOperation | None]:
    """Decide and execute one entry, turning per-entry errors into outcomes."""
    try:
        op = processor.process(entry)
    except PathCollapseError as e:
        logger.warning("Skipping '%s': %s", entry, e)
        return OperationOutcome.failure(entry, e), None
    except (TemplateError, OSError) as e:
        logger.error("Failed to process '%s': %s", entry, e)
        return OperationOutcome.failure(entry, e), None

    try:
        outcome = executor.execute(op)
    except OSError as e:
        logger.error("Failed to materialize '%s': %s", entry, e)
        return OperationOutcome.failure(entry, e), op

    logger.info("%s %s", outcome.marker, outcome.message)
    return outcome, op


def materialize(processor: TemplateProcessor, executor: OperationExecutor) -> MaterializationReport:
    """Walk the template root and materialize every entry.

    Returns:
        MaterializationReport with one outcome per visited entry.
    """
    report = MaterializationReport()
    _walk(processor.template_root, processor, executor, report)
    logger.info(
        "Materialized %d entr%s (%s)",
        report.total,
        "y" if report.total == 1 else "ies",
        report.status,
    )
    return report


def _walk(
    directory: Path,
    processor: TemplateProcessor,
    executor: OperationExecutor,
    report: MaterializationReport,
) -> None:
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        logger.error("Cannot list '%s': %s", directory, e)
        report.add(OperationOutcome.failure(directory, e))
        return

    for entry in entries:
        outcome, op = process_entry(entry, processor, executor)
        report.add(outcome)
        descend = (
            outcome.ok
            and isinstance(op, CreateDirectoryOperation)
            and not entry.is_symlink()
        )
        if descend:
            _walk(entry, processor, executor, report)
