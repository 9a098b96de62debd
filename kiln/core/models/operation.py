"""
File operations and their outcomes — the materialization contract.

The decision step turns each template entry into exactly one operation;
the execution step turns each operation into one outcome.  Operations are
plain data; deciding one never touches the output tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Union

OutcomeStatus = Literal["created", "overwritten", "skipped", "ignored", "failed"]


@dataclass(frozen=True)
class CopyOperation:
    """Byte-for-byte copy of a non-template file."""

    source: Path
    target: Path
    target_exists: bool
    kind: Literal["copy"] = "copy"

    def describe(self, overwrite: bool = True) -> str:
        if not self.target_exists:
            return f"Copying '{self.source}' to '{self.target}'"
        if overwrite:
            return f"Copying '{self.source}' to '{self.target}' (overwriting existing file)"
        return f"Skipping copy of '{self.source}' to '{self.target}' (target already exists)"


@dataclass(frozen=True)
class WriteOperation:
    """Write the rendered content of a template file.

    ``source`` is informational (file mode is copied from it when set).
    """

    target: Path
    content: str
    target_exists: bool
    source: Path | None = None
    kind: Literal["write"] = "write"

    def describe(self, overwrite: bool = True) -> str:
        if not self.target_exists:
            return f"Writing to '{self.target}'"
        if overwrite:
            return f"Writing to '{self.target}' (overwriting existing file)"
        return f"Skipping write to '{self.target}' (target already exists)"


@dataclass(frozen=True)
class CreateDirectoryOperation:
    target: Path
    target_exists: bool
    kind: Literal["create_directory"] = "create_directory"

    def describe(self, overwrite: bool = True) -> str:
        if self.target_exists:
            return f"Skipping directory creation '{self.target}' (already exists)"
        return f"Creating directory '{self.target}'"


@dataclass(frozen=True)
class IgnoreOperation:
    source: Path
    kind: Literal["ignore"] = "ignore"

    def describe(self, overwrite: bool = True) -> str:
        return f"Ignoring '{self.source}' (matches ignore pattern)"


FileOperation = Union[CopyOperation, WriteOperation, CreateDirectoryOperation, IgnoreOperation]


# Status → action label shown to the user
ACTION_LABELS: dict[str, str] = {
    "created": "creating",
    "overwritten": "overwriting",
    "skipped": "skipping",
    "ignored": "ignoring",
    "failed": "failed",
}


@dataclass
class OperationOutcome:
    """Result of executing (or failing to decide) one template entry."""

    status: OutcomeStatus
    path: str
    message: str = ""
    error: str | None = None

    @property
    def action(self) -> str:
        return ACTION_LABELS[self.status]

    @property
    def ok(self) -> bool:
        return self.status != "failed"

    @property
    def marker(self) -> str:
        if self.status == "failed":
            return "✗"
        if self.status in ("skipped", "ignored"):
            return "⊘"
        return "✓"

    @classmethod
    def failure(cls, path: str | Path, error: Exception | str) -> OperationOutcome:
        return cls(status="failed", path=str(path), message=f"Failed on '{path}': {error}", error=str(error))

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "status": self.status,
            "action": self.action,
            "path": self.path,
            "message": self.message,
        }
        if self.error:
            d["error"] = self.error
        return d
