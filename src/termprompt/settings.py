from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Final, List, Optional

import json5  # type: ignore
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from termprompt.render_style import TextRenderStyle


# Variable replacement pattern.
# Supports:
#   - ${NAME}
#   - ${env:NAME}
# Ignores '$${NAME}' so it can be used to escape a literal '${NAME}'.
VAR_PATTERN = re.compile(
    r"(?<!\$)\$\{(?:env:)?([A-Za-z_][A-Za-z0-9_]*)\}"
)
ESCAPED_VAR_PATTERN = re.compile(r"\$(\$\{[^}]*\})")

YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})
JSON_SUFFIXES: Final[frozenset[str]] = frozenset({".json", ".json5"})


class SettingsError(ValueError):
    pass


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"
    critical = "critical"


class TUIOptions(BaseModel):
    unicode: bool = True
    ascii_fallback: bool = False


class FieldSettings(BaseModel):
    """
    One input field of the prompt form.
    - name: key used when reporting the final value
    - label: text shown before the separator
    - render_style: default, password or invisible
    - border: wrap the field in a bordered block
    - title: optional title drawn on the top border
    - height: number of text rows the value may wrap onto
    """

    name: str
    label: str
    render_style: TextRenderStyle = TextRenderStyle.DEFAULT
    border: bool = False
    title: Optional[str] = None
    height: int = Field(default=1, ge=1)

    @field_validator("render_style", mode="before")
    @classmethod
    def _normalize_render_style(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v


def _default_fields() -> List[FieldSettings]:
    return [
        FieldSettings(name="username", label="Username"),
        FieldSettings(
            name="password",
            label="Password",
            render_style=TextRenderStyle.PASSWORD,
        ),
    ]


class Settings(BaseModel):
    tui: TUIOptions = Field(default_factory=TUIOptions)
    log_level: LogLevel = LogLevel.info
    log_file: Optional[str] = "termprompt.log"
    fields: List[FieldSettings] = Field(default_factory=_default_fields)

    @field_validator("fields")
    @classmethod
    def _validate_fields(cls, v: List[FieldSettings]) -> List[FieldSettings]:
        if not v:
            raise ValueError("At least one field must be configured")
        seen: set[str] = set()
        for item in v:
            if item.name in seen:
                raise ValueError(f"Duplicate field name: {item.name}")
            seen.add(item.name)
        return v


def _expand_string(value: str, env: Dict[str, str]) -> str:
    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in env:
            raise SettingsError(f"Undefined variable: {name}")
        return env[name]

    expanded = VAR_PATTERN.sub(_replace, value)
    return ESCAPED_VAR_PATTERN.sub(r"\1", expanded)


def expand_variables(doc: Any, env: Optional[Dict[str, str]] = None) -> Any:
    env_map = dict(os.environ) if env is None else env
    if isinstance(doc, str):
        return _expand_string(doc, env_map)
    if isinstance(doc, dict):
        return {k: expand_variables(v, env_map) for k, v in doc.items()}
    if isinstance(doc, list):
        return [expand_variables(item, env_map) for item in doc]
    return doc


def _read_document(path: Path) -> Any:
    suffix = path.suffix.lower()
    if suffix not in YAML_SUFFIXES and suffix not in JSON_SUFFIXES:
        raise SettingsError(f"Unsupported settings file extension: {path.suffix}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SettingsError(f"Cannot read settings file {path}: {e}") from e

    if suffix in YAML_SUFFIXES:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid YAML in {path}: {e}") from e
    try:
        return json5.loads(text)
    except ValueError as e:
        raise SettingsError(f"Invalid JSON in {path}: {e}") from e


def load_settings(path: str | Path, env: Optional[Dict[str, str]] = None) -> Settings:
    path = Path(path)
    doc = _read_document(path)
    if doc is None:
        doc = {}
    if not isinstance(doc, dict):
        raise SettingsError(f"Settings root must be a mapping in {path}")
    doc = expand_variables(doc, env)
    try:
        return Settings.model_validate(doc)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {path}: {e}") from e
