"""
Template rendering primitive — Jinja2 behind a small interface.

The answer engine and the materializer receive a renderer instance rather
than reaching for a module-level environment.

Two operations:

    render(text, context)                     -> str
    execute_boolean_expression(expr, context) -> bool

Both raise :class:`~kiln.core.errors.TemplateError` on syntax or runtime
failures.  Undefined names are lenient: they render as ``""`` and are
falsy in expressions.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any

import jinja2
from jinja2 import Environment, Undefined

from kiln.core.errors import TemplateError

logger = logging.getLogger(__name__)

# Runtime failures a template expression can raise besides jinja2's own
_RUNTIME_ERRORS = (
    jinja2.TemplateError,
    TypeError,
    ValueError,
    ArithmeticError,
    AttributeError,
    LookupError,
    re.error,
)


class TemplateRenderer(ABC):
    """Renders template strings against an answer context."""

    @abstractmethod
    def render(self, text: str, context: dict[str, Any]) -> str:
        """Render *text*; raise TemplateError on failure."""

    @abstractmethod
    def execute_boolean_expression(self, expression: str, context: dict[str, Any]) -> bool:
        """Evaluate *expression* to a bool; raise TemplateError on failure."""


class JinjaRenderer(TemplateRenderer):
    """Jinja2-backed renderer with kiln's string filters."""

    def __init__(self) -> None:
        self.env = Environment(
            autoescape=False,
            keep_trailing_newline=True,
            undefined=Undefined,
        )
        self.env.filters["slugify"] = slugify
        self.env.filters["snake_case"] = snake_case
        self.env.filters["kebab_case"] = kebab_case
        self.env.filters["camel_case"] = camel_case
        self.env.filters["pascal_case"] = pascal_case
        self.env.filters["regex"] = regex_search

    def render(self, text: str, context: dict[str, Any]) -> str:
        # Plain text never goes through the parser
        if "{" not in text:
            return text
        try:
            return self.env.from_string(text).render(context)
        except _RUNTIME_ERRORS as e:
            raise TemplateError(f"Failed to render template {text!r}: {e}") from e

    def execute_boolean_expression(self, expression: str, context: dict[str, Any]) -> bool:
        expression = expression.strip()
        if not expression:
            return True
        try:
            compiled = self.env.compile_expression(expression, undefined_to_none=True)
            return bool(compiled(context))
        except _RUNTIME_ERRORS as e:
            raise TemplateError(f"Failed to evaluate expression {expression!r}: {e}") from e


# ── Filters ─────────────────────────────────────────────────────


def slugify(value: Any) -> str:
    """``"My Project!"`` → ``"my-project"``."""
    slug = re.sub(r"[^a-z0-9]+", "-", str(value).lower().strip())
    return slug.strip("-")


def _words(value: Any) -> list[str]:
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", str(value))
    text = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", text)
    return [w for w in re.split(r"[^A-Za-z0-9]+", text) if w]


def snake_case(value: Any) -> str:
    """``"SomeThing"`` / ``"some-thing"`` → ``"some_thing"``."""
    return "_".join(w.lower() for w in _words(value))


def kebab_case(value: Any) -> str:
    return "-".join(w.lower() for w in _words(value))


def pascal_case(value: Any) -> str:
    """``"some-thing"`` / ``"some_thing"`` → ``"SomeThing"``."""
    return "".join(w.capitalize() for w in _words(value))


def camel_case(value: Any) -> str:
    pascal = pascal_case(value)
    return pascal[:1].lower() + pascal[1:]


def regex_search(value: Any, pattern: str) -> bool:
    """True when *pattern* matches anywhere in *value*."""
    if value is None:
        return False
    return re.search(pattern, str(value)) is not None
