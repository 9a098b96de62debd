"""
Tests for the ignore matcher — built-in patterns and .kilnignore.
"""

from pathlib import Path

import pytest

from kiln.core.config.ignore import (
    DEFAULT_IGNORE_PATTERNS,
    IgnoreMatcher,
    load_ignore_matcher,
    parse_ignore_text,
)


class TestDefaultPatterns:
    """Built-in exclusions apply whatever the user declares."""

    @pytest.mark.parametrize(
        "path",
        [
            ".git",
            ".git/config",
            ".git/objects/ab/cdef",
            ".hg",
            ".svn/entries",
            ".DS_Store",
            "src/.DS_Store",
            "kiln.json",
            "kiln.yml",
            "kiln.yaml",
            ".kilnignore",
            "hooks",
            "hooks/pre_gen_project",
        ],
    )
    def test_matches(self, path):
        assert IgnoreMatcher().matches(path)

    @pytest.mark.parametrize("path", ["README.md", "src/main.py", ".github/workflows/ci.yml", "gitignore"])
    def test_does_not_match(self, path):
        assert not IgnoreMatcher().matches(path)

    def test_user_patterns_cannot_remove_defaults(self):
        matcher = IgnoreMatcher(["*.pyc"])
        assert matcher.matches(".git/HEAD")
        assert matcher.matches("a/.DS_Store")

    def test_patterns_lists_defaults_first(self):
        matcher = IgnoreMatcher(["*.log"])
        assert matcher.patterns[: len(DEFAULT_IGNORE_PATTERNS)] == list(DEFAULT_IGNORE_PATTERNS)
        assert matcher.patterns[-1] == "*.log"

    def test_root_is_never_ignored(self):
        assert not IgnoreMatcher(["*"]).matches(".")


class TestUserPatterns:
    def test_extension_glob(self):
        matcher = IgnoreMatcher(["*.pyc"])
        assert matcher.matches("module.pyc")
        assert matcher.matches("pkg/module.pyc")
        assert not matcher.matches("module.py")

    def test_directory_pattern(self):
        matcher = IgnoreMatcher(["build/"])
        assert matcher.matches("build")
        assert matcher.matches("build/out/app.bin")
        assert not matcher.matches("builder.py")

    def test_double_star_prefix_matches_at_root(self):
        matcher = IgnoreMatcher(["**/__pycache__/"])
        assert matcher.matches("__pycache__")
        assert matcher.matches("pkg/__pycache__/x.pyc")

    def test_leading_slash_and_dot_slash_normalized(self):
        matcher = IgnoreMatcher(["/secret.txt", "./notes.md"])
        assert matcher.matches("secret.txt")
        assert matcher.matches("notes.md")

    def test_template_expressions_matched_literally(self):
        matcher = IgnoreMatcher(["{{project_name}}/scratch"])
        assert matcher.matches("{{project_name}}/scratch")

    def test_accepts_path_objects(self):
        assert IgnoreMatcher(["*.tmp"]).matches(Path("a") / "b.tmp")


class TestIgnoreFile:
    def test_parse_skips_comments_and_blanks(self):
        text = "# generated files\n\n*.pyc\n   \n  dist/  \n#*.log\n"
        assert parse_ignore_text(text) == ["*.pyc", "dist/"]

    def test_missing_file_uses_defaults(self, tmp_path: Path):
        matcher = load_ignore_matcher(tmp_path)
        assert matcher.user_patterns == []
        assert matcher.matches(".git")

    def test_load_from_file(self, tmp_path: Path):
        (tmp_path / ".kilnignore").write_text("# comment\n*.log\nvendor/\n")
        matcher = load_ignore_matcher(tmp_path)
        assert matcher.user_patterns == ["*.log", "vendor/"]
        assert matcher.matches("logs/app.log")
        assert matcher.matches("vendor/lib/x.js")
        assert matcher.matches(".svn")
