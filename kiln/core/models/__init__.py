"""
Domain models for kiln.

All models are re-exported here for convenient access:

    from kiln.core.models import Question, TemplateConfig, WriteOperation
"""

from kiln.core.models.operation import (
    ACTION_LABELS,
    CopyOperation,
    CreateDirectoryOperation,
    FileOperation,
    IgnoreOperation,
    OperationOutcome,
    WriteOperation,
)
from kiln.core.models.question import (
    DEFAULT_TEMPLATE_SUFFIX,
    Question,
    QuestionKind,
    Secret,
    TemplateConfig,
    Validation,
)

__all__ = [
    # operation.py
    "ACTION_LABELS",
    "CopyOperation",
    "CreateDirectoryOperation",
    "FileOperation",
    "IgnoreOperation",
    "OperationOutcome",
    "WriteOperation",
    # question.py
    "DEFAULT_TEMPLATE_SUFFIX",
    "Question",
    "QuestionKind",
    "Secret",
    "TemplateConfig",
    "Validation",
]
