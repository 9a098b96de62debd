"""
Shared test fixtures and configuration.
"""

import stat
import textwrap
from pathlib import Path

import pytest

from kiln.core.services.prompts import Prompter
from kiln.core.services.renderer import JinjaRenderer


class ScriptedPrompter(Prompter):
    """Prompter double that replays canned answers and records what was asked.

    ``responses`` feed text/hidden/choice prompts in order; ``confirms``
    feed yes/no prompts.  Running out of either fails the test.
    """

    def __init__(self, responses=None, confirms=None, interactive=True):
        self.responses = list(responses or [])
        self.confirms = list(confirms or [])
        self.interactive = interactive
        self.asked: list[str] = []
        self.confirmed: list[str] = []
        self.warnings: list[str] = []

    def _next(self, prompt):
        self.asked.append(prompt)
        if not self.responses:
            raise AssertionError(f"Unexpected prompt: {prompt!r}")
        return self.responses.pop(0)

    def text(self, prompt, default=""):
        return self._next(prompt)

    def read_hidden(self, prompt):
        return self._next(prompt)

    def single_choice(self, prompt, choices, default_index=0):
        return self._next(prompt)

    def multiple_choice(self, prompt, choices, defaults):
        return self._next(prompt)

    def confirm(self, prompt, default=False):
        self.confirmed.append(prompt)
        if not self.confirms:
            raise AssertionError(f"Unexpected confirmation: {prompt!r}")
        return self.confirms.pop(0)

    def warn(self, message):
        self.warnings.append(message)


@pytest.fixture
def scripted():
    """Factory for ScriptedPrompter instances."""
    return ScriptedPrompter


@pytest.fixture
def renderer() -> JinjaRenderer:
    return JinjaRenderer()


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create *files* under *root*; a key ending in ``/`` is an empty directory."""
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        path = root / rel
        if rel.endswith("/"):
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content))
    return root


def _write_hook(template: Path, name: str, body: str) -> Path:
    """Write an executable shell hook into ``template/hooks``."""
    hook = template / "hooks" / name
    hook.parent.mkdir(parents=True, exist_ok=True)
    hook.write_text("#!/bin/sh\n" + textwrap.dedent(body))
    hook.chmod(hook.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return hook


@pytest.fixture
def make_template(tmp_path: Path):
    """Build a template directory from a mapping of relative path → content."""

    def _make(files: dict[str, str], name: str = "template") -> Path:
        return write_tree(tmp_path / name, files)

    return _make


@pytest.fixture
def greeting_template(make_template) -> Path:
    """Small template: one rendered file, one plain file, one conditional dir."""
    return make_template(
        {
            "kiln.yaml": """\
                project_name:
                  type: str
                  help: Project name?
                  default: demo
                greeting:
                  type: str
                  help: Greeting for {{ project_name }}?
                  default: Hello, {{ project_name }}
                with_docs:
                  type: bool
                  help: Add docs?
                  default: false
            """,
            "{{project_name}}/README.md.kiln.j2": "# {{ project_name }}\n\n{{ greeting }}\n",
            "{{project_name}}/LICENSE": "Plain text {{ not_rendered }}\n",
            "{{project_name}}/{% if with_docs %}docs{% endif %}/index.md.kiln.j2": "Docs for {{ project_name }}\n",
        }
    )


@pytest.fixture
def write_hook():
    """Write an executable shell hook: ``write_hook(template, name, body)``."""
    return _write_hook
