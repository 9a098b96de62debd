"""
Template configuration loader — reads kiln.json / kiln.yml / kiln.yaml.

Reads JSON or YAML, validates against the pydantic question models, and
returns a typed :class:`TemplateConfig`.  Two layouts are accepted:

    # flat: every top-level key is a question
    project_name:
      type: str
      help: Project name?

    # wrapped
    schemaVersion: v1
    template_suffix: .kiln.j2
    questions:
      project_name: {type: str, help: Project name?}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from kiln.core.errors import ConfigError
from kiln.core.models.question import DEFAULT_TEMPLATE_SUFFIX, Question, TemplateConfig

logger = logging.getLogger(__name__)

# Searched in this order; the first one present wins
CONFIG_FILES = ("kiln.json", "kiln.yml", "kiln.yaml")

SUPPORTED_SCHEMA_VERSIONS = ("v1",)

# Hook scripts live in this template subdirectory
HOOKS_DIR = "hooks"
PRE_GEN_HOOK = "pre_gen_project"
POST_GEN_HOOK = "post_gen_project"


def find_config_file(template_dir: Path) -> Path | None:
    """Return the first configuration file present in *template_dir*."""
    for name in CONFIG_FILES:
        candidate = template_dir / name
        if candidate.is_file():
            return candidate
    return None


def load_template_config(template_dir: Path) -> TemplateConfig:
    """Load and validate the template configuration.

    Args:
        template_dir: Local template root.

    Returns:
        Validated TemplateConfig with questions in declaration order.

    Raises:
        ConfigError: If no config file exists or it is invalid.
    """
    path = find_config_file(template_dir)
    if path is None:
        raise ConfigError(
            f"No configuration file found in {template_dir} "
            f"(tried: {', '.join(CONFIG_FILES)})"
        )

    logger.debug("Loading template config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    data = parse_config_text(raw, path)
    config = build_template_config(data, source=str(path))
    logger.info("Loaded %d question(s) from %s", len(config.questions), path.name)
    return config


def parse_config_text(raw: str, path: Path) -> Any:
    """Parse raw config text as JSON (for .json) or YAML."""
    if path.suffix == ".json":
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e


def build_template_config(data: Any, source: str = "<config>") -> TemplateConfig:
    """Validate a parsed config document into a TemplateConfig."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {source}, got {type(data).__name__}")

    if _is_wrapped(data):
        schema_version = str(data.get("schemaVersion", "v1"))
        if schema_version not in SUPPORTED_SCHEMA_VERSIONS:
            raise ConfigError(
                f"Unsupported schemaVersion '{schema_version}' in {source} "
                f"(supported: {', '.join(SUPPORTED_SCHEMA_VERSIONS)})"
            )
        template_suffix = data.get("template_suffix") or DEFAULT_TEMPLATE_SUFFIX
        raw_questions = data.get("questions") or {}
        if not isinstance(raw_questions, dict):
            raise ConfigError(f"'questions' must be a mapping in {source}")
    else:
        schema_version = "v1"
        template_suffix = DEFAULT_TEMPLATE_SUFFIX
        raw_questions = data

    if not isinstance(template_suffix, str) or not template_suffix.strip():
        raise ConfigError(f"'template_suffix' must be a non-empty string in {source}")

    questions: dict[str, Question] = {}
    for key, body in raw_questions.items():
        questions[str(key)] = _build_question(str(key), body, source)

    return TemplateConfig(
        schema_version=schema_version,
        template_suffix=template_suffix,
        questions=questions,
    )


def _is_wrapped(data: dict) -> bool:
    if "schemaVersion" in data:
        return True
    questions = data.get("questions")
    # A flat question literally named "questions" has a "type" or "help" of its own
    return isinstance(questions, dict) and not ({"type", "help"} & set(questions))


def _build_question(key: str, body: Any, source: str) -> Question:
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise ConfigError(
            f"Question '{key}' in {source} must be a mapping, got {type(body).__name__}"
        )
    try:
        return Question.model_validate({**body, "key": key})
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid question '{key}' in {source}: {problems}") from e
