"""
Check use case — validate a template without generating anything.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from kiln.adapters.shell.hooks import get_hook_paths, is_executable
from kiln.core.config.ignore import load_ignore_matcher
from kiln.core.config.loader import find_config_file, load_template_config
from kiln.core.errors import KilnError
from kiln.core.models.question import QuestionKind, TemplateConfig
from kiln.core.use_cases.template_source import resolve_template_source


@dataclass
class TemplateCheckResult:
    """Result of template validation."""

    valid: bool = False
    template: str = ""
    config_file: str | None = None
    config: TemplateConfig | None = None
    ignore_patterns: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "template": self.template,
            "config_file": self.config_file,
            "errors": self.errors,
            "warnings": self.warnings,
            "question_count": len(self.config.questions) if self.config else 0,
            "template_suffix": self.config.template_suffix if self.config else None,
            "ignore_patterns": self.ignore_patterns,
        }


def check_template(template: str) -> TemplateCheckResult:
    """Load a template's configuration and report problems.

    Args:
        template: Local template directory or git URL.

    Returns:
        TemplateCheckResult with errors (fatal for generation) and warnings.
    """
    result = TemplateCheckResult(template=str(template))

    try:
        with resolve_template_source(template) as root:
            found = find_config_file(root)
            result.config_file = found.name if found else None

            config = load_template_config(root)
            result.config = config
            result.ignore_patterns = load_ignore_matcher(root).user_patterns

            for path in get_hook_paths(root).existing():
                if not is_executable(path):
                    result.warnings.append(f"Hook '{path.name}' is not executable and will fail to run.")
    except KilnError as e:
        result.errors.append(f"[{e.phase}] {e}")
        return result

    # Semantic checks
    for question in config.ordered():
        key = question.key
        kind = question.kind

        if question.multiselect and not question.choices:
            result.warnings.append(f"Question '{key}' sets multiselect but has no choices.")

        if question.secret is not None and kind is not QuestionKind.TEXT:
            result.warnings.append(f"Question '{key}' is secret but is not a free-text question.")

        default = question.default
        if kind is QuestionKind.SINGLE_CHOICE and default is not None and default not in question.choices:
            result.warnings.append(
                f"Question '{key}' default {default!r} is not one of its choices; "
                f"'{question.choices[0]}' will be used."
            )
        if kind is QuestionKind.MULTIPLE_CHOICE and default is not None:
            labels = list(default) if isinstance(default, (list, dict)) else [default]
            unknown = [str(v) for v in labels if v not in question.choices]
            if unknown:
                result.warnings.append(
                    f"Question '{key}' default selects unknown choice(s): {', '.join(unknown)}"
                )

    result.valid = len(result.errors) == 0
    return result
