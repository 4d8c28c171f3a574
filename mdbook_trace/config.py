"""Preprocessor configuration and its validation."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml
from jsonschema import Draft202012Validator

from .constants import (
    DEFAULT_PARENT_NUMBERING,
    DEFAULT_RECORD_HEADING,
    DEFAULT_TRACE_HEADING,
)
from .errors import ConfigurationError, DuplicateTargetConfigurationError

SCHEMA_PATH = Path(__file__).resolve().parent / "schema" / "config.schema.json"


class ParentNumbering(str, enum.Enum):
    """How traces of a chapter are numbered when it has subchapters."""

    # First trace of chapter 1 and its first subchapter are both 1.1.
    ALLOW_DUPLICATES = "allow-duplicates"
    # Traces continue after the last subchapter: two subchapters give 1.3.
    OFFSET = "offset"
    # Traces of a chapter with subchapters get a ".0" segment: 1.0.1.
    ZERO = "zero"


@dataclass(frozen=True)
class TargetConfig:
    id: str
    name: str


@dataclass(frozen=True)
class TraceConfig:
    qualified_footnotes: bool = False
    chapter_numbers: bool = False
    footnote_divider: bool = False
    parent_numbering: ParentNumbering = ParentNumbering.ZERO
    record_heading: str = DEFAULT_RECORD_HEADING
    trace_heading: str = DEFAULT_TRACE_HEADING
    targets: tuple[TargetConfig, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for target in self.targets:
            if target.id in seen:
                raise DuplicateTargetConfigurationError(target.id)
            seen.add(target.id)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> TraceConfig:
        payload = dict(raw or {})
        _validate(payload)
        return cls(
            qualified_footnotes=bool(payload.get("qualified-footnotes", False)),
            chapter_numbers=bool(payload.get("chapter-numbers", False)),
            footnote_divider=bool(payload.get("footnote-divider", False)),
            parent_numbering=ParentNumbering(
                payload.get("parent-numbering", DEFAULT_PARENT_NUMBERING)
            ),
            record_heading=str(payload.get("record-heading", DEFAULT_RECORD_HEADING)),
            trace_heading=str(payload.get("trace-heading", DEFAULT_TRACE_HEADING)),
            targets=_read_targets(payload.get("targets", {})),
        )


def _validate(payload: dict[str, Any]) -> None:
    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    validator = Draft202012Validator(schema)
    errors = sorted(
        validator.iter_errors(payload), key=lambda err: list(err.absolute_path)
    )
    if errors:
        details = "\n".join(
            f"- {'/'.join(str(part) for part in err.absolute_path) or '<root>'}: "
            f"{err.message}"
            for err in errors
        )
        raise ConfigurationError(f"invalid trace configuration:\n{details}")


def _read_targets(raw: Any) -> tuple[TargetConfig, ...]:
    targets: list[TargetConfig] = []
    if isinstance(raw, Mapping):
        for target_id, value in raw.items():
            name = value if isinstance(value, str) else value["name"]
            targets.append(TargetConfig(id=str(target_id), name=str(name)))
    else:
        for item in raw:
            targets.append(TargetConfig(id=str(item["id"]), name=str(item["name"])))
    return tuple(targets)


def _duplicate_yaml_targets(text: str) -> list[str]:
    root = yaml.compose(text, Loader=yaml.SafeLoader)
    if not isinstance(root, yaml.MappingNode):
        return []
    for key_node, value_node in root.value:
        if key_node.value != "targets" or not isinstance(value_node, yaml.MappingNode):
            continue
        seen: set[str] = set()
        duplicates: list[str] = []
        for target_node, _ in value_node.value:
            if target_node.value in seen:
                duplicates.append(target_node.value)
            seen.add(target_node.value)
        return duplicates
    return []


def load_config_file(path: Path) -> TraceConfig:
    try:
        text = path.read_text(encoding="utf-8")
        duplicates = _duplicate_yaml_targets(text)
        data = yaml.safe_load(text)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"failed to read config {path}: {exc}") from exc
    if duplicates:
        raise DuplicateTargetConfigurationError(duplicates[0])
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"config root must be a mapping: {path}")
    return TraceConfig.from_mapping(data)
