"""
Generate use case — materialize a template into an output directory.

The full vertical slice behind ``kiln generate``:

    output guard → template source → config + ignore file → hook confirmation
        → pre-hook → answers → output tree → post-hook

Every ``KilnError`` is caught here and returned on the result with its
phase and exit code; nothing is raised to the CLI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from kiln.adapters.shell.hooks import get_hook_paths, run_hook
from kiln.core.config.ignore import load_ignore_matcher
from kiln.core.config.loader import load_template_config
from kiln.core.engine.materializer import (
    ConflictPolicy,
    MaterializationReport,
    OperationExecutor,
    TemplateProcessor,
    materialize,
)
from kiln.core.errors import KilnError, OutputDirectoryExistsError
from kiln.core.services.answers import AnswerSource, resolve_answers
from kiln.core.services.prompts import ClickPrompter, Prompter
from kiln.core.services.renderer import JinjaRenderer, TemplateRenderer
from kiln.core.use_cases.template_source import resolve_template_source

logger = logging.getLogger(__name__)


@dataclass
class GenerateResult:
    """Result of one ``kiln generate`` run."""

    template: str = ""
    output_dir: Path | None = None
    answers: dict[str, Any] = field(default_factory=dict)
    report: MaterializationReport | None = None
    hooks_run: list[str] = field(default_factory=list)
    error: str | None = None
    error_phase: str | None = None
    exit_code: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def fail(self, error: KilnError) -> GenerateResult:
        self.error = str(error)
        self.error_phase = error.phase
        self.exit_code = error.exit_code
        return self

    def to_dict(self) -> dict:
        result: dict = {
            "template": self.template,
            "output_dir": str(self.output_dir) if self.output_dir else None,
        }
        if self.error:
            result["error"] = self.error
            result["error_phase"] = self.error_phase
            result["exit_code"] = self.exit_code
            return result

        result["answers"] = self.answers
        result["hooks_run"] = self.hooks_run
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def run_generate(
    template: str,
    output_dir: str | Path,
    force: bool = False,
    answers_json: str | None = None,
    stdin_text: str | None = None,
    skip_hooks_check: bool = False,
    conflict_policy: ConflictPolicy = ConflictPolicy.PROMPT,
    prompter: Prompter | None = None,
    renderer: TemplateRenderer | None = None,
    hook_timeout: float | None = None,
) -> GenerateResult:
    """Generate a project from *template* into *output_dir*.

    Args:
        template: Local template directory or git URL.
        output_dir: Output root; must not exist unless *force*.
        force: Reuse an existing output root.
        answers_json: JSON object of answers (highest precedence).
        stdin_text: JSON object read from stdin (second precedence).
        skip_hooks_check: Run hooks without asking.
        conflict_policy: What to do with existing target files.
        prompter: Interactive source and confirmations (default: terminal).
        renderer: Template renderer (default: Jinja2).
        hook_timeout: Seconds before a hook is killed; None waits forever.

    Returns:
        GenerateResult with answers and materialization report, or the error.
    """
    output = Path(output_dir)
    result = GenerateResult(template=str(template), output_dir=output)
    prompter = prompter or ClickPrompter()
    renderer = renderer or JinjaRenderer()

    try:
        # ── Output guard ─────────────────────────────────────────
        if output.exists() and not force:
            raise OutputDirectoryExistsError(str(output))

        # Explicit answers are checked before anything runs
        explicit = AnswerSource.from_json("--answers", answers_json, strict=True)

        with resolve_template_source(template) as root:
            # ── Load template ────────────────────────────────────
            config = load_template_config(root)
            ignore = load_ignore_matcher(root)

            # ── Hooks ────────────────────────────────────────────
            hooks = get_hook_paths(root)
            present = hooks.existing()
            run_hooks = False
            if present:
                names = ", ".join(p.name for p in present)
                run_hooks = skip_hooks_check or prompter.confirm(
                    f"This template contains hooks that will execute commands on your system ({names}). "
                    "Do you want to run them?",
                    default=False,
                )
                if not run_hooks:
                    logger.warning("Hooks not run: %s", names)

            pre_output = None
            if run_hooks and hooks.pre.exists():
                pre_output = run_hook(hooks.pre, root, output, None, capture_output=True, timeout=hook_timeout)
                result.hooks_run.append(hooks.pre.name)

            # ── Answers ──────────────────────────────────────────
            sources = [
                explicit,
                AnswerSource.from_json("stdin", stdin_text),
                AnswerSource.from_json("pre-generation hook", pre_output),
            ]
            answers = resolve_answers(config.ordered(), renderer, sources=sources, prompter=prompter)
            result.answers = answers

            # ── Materialize ──────────────────────────────────────
            output.mkdir(parents=True, exist_ok=True)
            processor = TemplateProcessor(
                renderer,
                template_root=root,
                output_root=output,
                answers=answers,
                ignore=ignore,
                template_suffix=config.template_suffix,
            )
            executor = OperationExecutor(policy=conflict_policy, prompter=prompter)
            result.report = materialize(processor, executor)

            if run_hooks and hooks.post.exists():
                run_hook(hooks.post, root, output, answers, timeout=hook_timeout)
                result.hooks_run.append(hooks.post.name)

    except KilnError as e:
        logger.debug("Generation failed in %s phase", e.phase, exc_info=True)
        return result.fail(e)
    except OSError as e:
        logger.debug("I/O failure outside the walk", exc_info=True)
        return result.fail(KilnError(f"I/O error: {e}"))

    return result
