"""
Tests for domain models — question kinds, operations, outcomes.
"""

from pathlib import Path

import pytest

from kiln.core.models import (
    CopyOperation,
    CreateDirectoryOperation,
    IgnoreOperation,
    OperationOutcome,
    Question,
    QuestionKind,
    TemplateConfig,
    WriteOperation,
)


class TestQuestionKind:
    """Kind derivation from type/choices/multiselect."""

    def test_text(self):
        assert Question(key="name").kind is QuestionKind.TEXT

    def test_boolean(self):
        assert Question(key="ok", type="bool").kind is QuestionKind.BOOLEAN

    def test_boolean_ignores_choices(self):
        q = Question(key="ok", type="bool", choices=["a"], multiselect=True)
        assert q.kind is QuestionKind.BOOLEAN

    def test_single_choice(self):
        assert Question(key="db", choices=["pg", "mysql"]).kind is QuestionKind.SINGLE_CHOICE

    def test_multiple_choice(self):
        q = Question(key="langs", choices=["py", "rs"], multiselect=True)
        assert q.kind is QuestionKind.MULTIPLE_CHOICE

    def test_multiselect_without_choices_is_text(self):
        assert Question(key="x", multiselect=True).kind is QuestionKind.TEXT

    def test_unknown_type_rejected(self):
        with pytest.raises(Exception):
            Question.model_validate({"key": "x", "type": "int"})

    def test_has_default(self):
        assert Question(key="x", default="").has_default
        assert not Question(key="x").has_default


class TestTemplateConfig:
    def test_defaults(self):
        config = TemplateConfig()
        assert config.schema_version == "v1"
        assert config.template_suffix == ".kiln.j2"
        assert config.ordered() == []

    def test_ordered_preserves_insertion(self):
        config = TemplateConfig(
            questions={
                "b": Question(key="b"),
                "a": Question(key="a"),
                "c": Question(key="c"),
            }
        )
        assert [q.key for q in config.ordered()] == ["b", "a", "c"]


class TestOperationMessages:
    """Human-readable descriptions of each operation."""

    def test_copy_new(self):
        op = CopyOperation(source=Path("/t/a.txt"), target=Path("/o/a.txt"), target_exists=False)
        assert op.describe() == "Copying '/t/a.txt' to '/o/a.txt'"

    def test_copy_overwrite(self):
        op = CopyOperation(source=Path("/t/a.txt"), target=Path("/o/a.txt"), target_exists=True)
        assert op.describe(overwrite=True).endswith("(overwriting existing file)")

    def test_copy_skip(self):
        op = CopyOperation(source=Path("/t/a.txt"), target=Path("/o/a.txt"), target_exists=True)
        assert op.describe(overwrite=False) == (
            "Skipping copy of '/t/a.txt' to '/o/a.txt' (target already exists)"
        )

    def test_write_messages(self):
        new = WriteOperation(target=Path("/o/r.md"), content="", target_exists=False)
        old = WriteOperation(target=Path("/o/r.md"), content="", target_exists=True)
        assert new.describe() == "Writing to '/o/r.md'"
        assert old.describe() == "Writing to '/o/r.md' (overwriting existing file)"
        assert old.describe(overwrite=False) == "Skipping write to '/o/r.md' (target already exists)"

    def test_directory_messages(self):
        assert CreateDirectoryOperation(Path("/o/d"), False).describe() == "Creating directory '/o/d'"
        assert CreateDirectoryOperation(Path("/o/d"), True).describe() == (
            "Skipping directory creation '/o/d' (already exists)"
        )

    def test_ignore_message(self):
        assert IgnoreOperation(Path("/t/.git")).describe() == "Ignoring '/t/.git' (matches ignore pattern)"

    def test_kind_tags(self):
        assert CopyOperation(Path("a"), Path("b"), False).kind == "copy"
        assert WriteOperation(Path("b"), "", False).kind == "write"
        assert CreateDirectoryOperation(Path("b"), False).kind == "create_directory"
        assert IgnoreOperation(Path("a")).kind == "ignore"


class TestOperationOutcome:
    @pytest.mark.parametrize(
        "status, action, marker",
        [
            ("created", "creating", "✓"),
            ("overwritten", "overwriting", "✓"),
            ("skipped", "skipping", "⊘"),
            ("ignored", "ignoring", "⊘"),
            ("failed", "failed", "✗"),
        ],
    )
    def test_labels(self, status, action, marker):
        outcome = OperationOutcome(status=status, path="p")
        assert outcome.action == action
        assert outcome.marker == marker

    def test_failure(self):
        outcome = OperationOutcome.failure(Path("/t/x"), ValueError("boom"))
        assert not outcome.ok
        assert outcome.error == "boom"
        assert outcome.to_dict()["error"] == "boom"

    def test_to_dict_without_error(self):
        d = OperationOutcome(status="created", path="/o/a", message="Writing to '/o/a'").to_dict()
        assert d == {
            "status": "created",
            "action": "creating",
            "path": "/o/a",
            "message": "Writing to '/o/a'",
        }
