"""
Answer resolution — turns the ordered question set into the answer context.

Questions are processed strictly in declaration order.  Each question sees
only the answers of the questions before it (its own candidate value is
added for validation only), so a reference to a later key renders as
undefined instead of failing.

For every question:

    1. ask_if false        → resolved default, nothing consulted
    2. an answer source    → value used verbatim (validated)
       has the key
    3. otherwise           → prompt, re-asking until valid

Sources are ranked: the first one holding a key wins.  The CLI builds them
as ``[--answers, stdin, pre-hook output]``; the prompter is the fallback.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from kiln.core.errors import ConfigError, TemplateError, ValidationError
from kiln.core.models.question import Question, QuestionKind
from kiln.core.services.prompts import DefaultsPrompter, Prompter
from kiln.core.services.renderer import TemplateRenderer

logger = logging.getLogger(__name__)

# Sentinel for "this source has no value for the key"
MISSING = object()

_TRUE_STRINGS = frozenset({"yes", "y", "true", "1", "on"})


# ── Answer sources ──────────────────────────────────────────────


@dataclass
class AnswerSource:
    """A named, partial supply of pre-determined answers."""

    name: str
    answers: dict[str, Any] = field(default_factory=dict)

    def lookup(self, key: str) -> Any:
        return self.answers.get(key, MISSING)

    def __len__(self) -> int:
        return len(self.answers)

    @classmethod
    def from_json(cls, name: str, text: str | None, strict: bool = False) -> AnswerSource:
        """Parse a JSON object into a source.

        Empty text yields an empty source.  Anything that is not a JSON
        object raises ConfigError when *strict*, otherwise it is logged and
        yields an empty source.
        """
        if not text or not text.strip():
            return cls(name)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            problem = f"{name} is not valid JSON: {e}"
            data = None
        else:
            problem = f"{name} must be a JSON object, got {type(data).__name__}"

        if isinstance(data, dict):
            return cls(name, data)
        if strict:
            raise ConfigError(problem)
        logger.warning("%s; ignoring it", problem)
        return cls(name)


@dataclass
class RenderedQuestion:
    """A question's help, default and ask_if evaluated against visible answers.

    ``default`` is in prompt form: an index for single choice, one bool per
    choice for multiple choice, a string for text, a bool for boolean.
    """

    ask: bool
    help: str
    default: Any


# ── Resolver ────────────────────────────────────────────────────


class AnswerResolver:
    """Resolves a question list into an ordered answer context."""

    def __init__(
        self,
        renderer: TemplateRenderer,
        prompter: Prompter | None = None,
        sources: list[AnswerSource] | tuple[AnswerSource, ...] = (),
    ) -> None:
        self.renderer = renderer
        self.prompter = prompter or DefaultsPrompter()
        self.sources = list(sources)

    def resolve(self, questions: list[Question]) -> dict[str, Any]:
        answers: dict[str, Any] = {}
        for question in questions:
            key = question.key
            visible = dict(answers)
            rendered = self.render_question(question, visible)

            if not rendered.ask:
                value = self.answer_form(question, rendered.default)
                logger.debug("Skipping '%s' (ask_if is false), using default %r", key, value)
            else:
                source, value = self.lookup(key)
                if source is not None:
                    logger.debug("Answer for '%s' supplied by %s", key, source.name)
                    error = self.validate(question, value, visible)
                    if error:
                        raise ValidationError(f"Invalid answer for '{key}' from {source.name}: {error}")
                else:
                    value = self.ask_until_valid(question, rendered, visible)

            answers[key] = value
        return answers

    def lookup(self, key: str) -> tuple[AnswerSource | None, Any]:
        for source in self.sources:
            value = source.lookup(key)
            if value is not MISSING:
                return source, value
        return None, MISSING

    # ── Rendering ───────────────────────────────────────────────

    def render_question(self, question: Question, visible: dict[str, Any]) -> RenderedQuestion:
        try:
            ask = self.renderer.execute_boolean_expression(question.ask_if, visible)
        except TemplateError as e:
            logger.debug("ask_if of '%s' failed, asking anyway: %s", question.key, e)
            ask = True

        try:
            help_text = self.renderer.render(question.help, visible)
        except TemplateError as e:
            logger.debug("help of '%s' failed to render: %s", question.key, e)
            help_text = question.help
        help_text = help_text.strip() or question.help.strip() or question.key

        return RenderedQuestion(ask=ask, help=help_text, default=self.default_for(question, visible))

    def default_for(self, question: Question, visible: dict[str, Any]) -> Any:
        kind = question.kind
        default = question.default

        if kind is QuestionKind.SINGLE_CHOICE:
            if isinstance(default, str) and default in question.choices:
                return question.choices.index(default)
            return 0

        if kind is QuestionKind.MULTIPLE_CHOICE:
            if isinstance(default, dict):
                selected = {str(k) for k in default}
            elif isinstance(default, list):
                selected = {v for v in default if isinstance(v, str)}
            else:
                selected = set()
            return [choice in selected for choice in question.choices]

        if kind is QuestionKind.BOOLEAN:
            return self._bool_default(question, visible)

        return self._text_default(question, visible)

    def _text_default(self, question: Question, visible: dict[str, Any]) -> str:
        default = question.default
        if default is None:
            return ""
        if not isinstance(default, str):
            return json.dumps(default)
        try:
            return self.renderer.render(default, visible)
        except TemplateError as e:
            logger.debug("default of '%s' failed to render: %s", question.key, e)
            return ""

    def _bool_default(self, question: Question, visible: dict[str, Any]) -> bool:
        default = question.default
        if isinstance(default, bool):
            return default
        if isinstance(default, (int, float)):
            return bool(default)
        if isinstance(default, str):
            try:
                default = self.renderer.render(default, visible)
            except TemplateError as e:
                logger.debug("default of '%s' failed to render: %s", question.key, e)
                return False
            return default.strip().lower() in _TRUE_STRINGS
        return False

    @staticmethod
    def answer_form(question: Question, default: Any) -> Any:
        """Convert a prompt-form default into the value stored as the answer."""
        kind = question.kind
        if kind is QuestionKind.SINGLE_CHOICE:
            return question.choices[default]
        if kind is QuestionKind.MULTIPLE_CHOICE:
            return [c for c, on in zip(question.choices, default) if on]
        return default

    # ── Prompting ───────────────────────────────────────────────

    def ask(self, question: Question, rendered: RenderedQuestion) -> Any:
        kind = question.kind
        prompt = rendered.help

        if kind is QuestionKind.MULTIPLE_CHOICE:
            picked = self.prompter.multiple_choice(prompt, question.choices, rendered.default)
            return [question.choices[i] for i in picked]
        if kind is QuestionKind.SINGLE_CHOICE:
            index = self.prompter.single_choice(prompt, question.choices, rendered.default)
            return question.choices[index]
        if kind is QuestionKind.BOOLEAN:
            return self.prompter.confirm(prompt, rendered.default)
        if question.secret is not None:
            return self.prompter.secret(
                prompt,
                default=rendered.default,
                confirm=question.secret.confirm,
                mismatch_err=question.secret.mismatch_err,
            )
        return self.prompter.text(prompt, rendered.default)

    def ask_until_valid(self, question: Question, rendered: RenderedQuestion, visible: dict[str, Any]) -> Any:
        while True:
            value = self.ask(question, rendered)
            error = self.validate(question, value, visible)
            if not error:
                return value
            if not self.prompter.interactive:
                raise ValidationError(f"Invalid answer for '{question.key}': {error}")
            self.prompter.warn(error)

    # ── Validation ──────────────────────────────────────────────

    def validate(self, question: Question, value: Any, visible: dict[str, Any]) -> str | None:
        """Return the rendered error message when *value* fails validation."""
        rule = question.validation
        if rule is None:
            return None

        context = {**visible, question.key: value}
        try:
            ok = self.renderer.execute_boolean_expression(rule.condition, context)
        except TemplateError as e:
            logger.warning("Validation of '%s' could not be evaluated, accepting: %s", question.key, e)
            return None
        if ok:
            return None

        try:
            message = self.renderer.render(rule.error_message, context)
        except TemplateError:
            message = rule.error_message
        return message.strip() or "Invalid answer"


def resolve_answers(
    questions: list[Question],
    renderer: TemplateRenderer,
    sources: list[AnswerSource] | tuple[AnswerSource, ...] = (),
    prompter: Prompter | None = None,
) -> dict[str, Any]:
    """Resolve *questions* into an answer context.

    Args:
        questions: Questions in evaluation order.
        renderer: Renders help/default/ask_if/validation templates.
        sources: Answer sources, highest precedence first.
        prompter: Fallback for keys no source supplies.

    Raises:
        ValidationError: A supplied value fails validation, or a secret
            confirmation keeps mismatching.
    """
    resolver = AnswerResolver(renderer, prompter=prompter, sources=sources)
    answers = resolver.resolve(questions)
    logger.info("Resolved %d answer(s)", len(answers))
    return answers
