"""
Question models — the declarative part of a template.

Loaded from kiln.json / kiln.yml / kiln.yaml in the template root.  A
question's *kind* is derived from its ``type``, ``choices`` and
``multiselect`` fields; the answer engine dispatches on the kind.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

DEFAULT_TEMPLATE_SUFFIX = ".kiln.j2"


class QuestionKind(str, Enum):
    """How a question is asked and what shape its answer takes."""

    TEXT = "text"                       # free text → str
    BOOLEAN = "boolean"                 # yes/no → bool
    SINGLE_CHOICE = "single_choice"     # one of choices → str
    MULTIPLE_CHOICE = "multiple_choice"  # subset of choices → list[str]


class Secret(BaseModel):
    """Masked input, optionally typed twice."""

    confirm: bool = False
    mismatch_err: str = "Mismatch"


class Validation(BaseModel):
    """Boolean expression an answer must satisfy.

    ``condition`` sees the preceding answers plus the candidate value under
    the question's own key.
    """

    condition: str
    error_message: str = "Invalid answer"


class Question(BaseModel):
    """One entry of the question set."""

    key: str = ""
    help: str = ""
    type: Literal["str", "bool"] = "str"
    default: Any = None
    choices: list[str] = Field(default_factory=list)
    multiselect: bool = False
    secret: Secret | None = None
    ask_if: str = ""
    validation: Validation | None = None

    @property
    def kind(self) -> QuestionKind:
        if self.type == "bool":
            return QuestionKind.BOOLEAN
        if self.choices and self.multiselect:
            return QuestionKind.MULTIPLE_CHOICE
        if self.choices:
            return QuestionKind.SINGLE_CHOICE
        return QuestionKind.TEXT

    @property
    def has_default(self) -> bool:
        return self.default is not None


class TemplateConfig(BaseModel):
    """Parsed template configuration.

    ``questions`` preserves declaration order, which is also the order in
    which questions are evaluated and in which answers become visible to
    later questions.
    """

    schema_version: str = "v1"
    template_suffix: str = DEFAULT_TEMPLATE_SUFFIX
    questions: dict[str, Question] = Field(default_factory=dict)

    def ordered(self) -> list[Question]:
        """Questions in evaluation order."""
        return list(self.questions.values())
