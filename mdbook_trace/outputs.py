from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from .constants import REPORT_SCHEMA_VERSION
from .errors import TraceError
from .registry import TraceRegistry

REPORT_SCHEMA_PATH = (
    Path(__file__).resolve().parent / "schema" / "trace-report.schema.json"
)


def _write_json(path: Path, value: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(value, indent=2, sort_keys=True) + "\n", encoding="utf-8"
    )


def build_report(registry: TraceRegistry) -> dict[str, Any]:
    targets: list[dict[str, Any]] = []
    for target in registry:
        records = [
            {
                "id": record,
                "traces": [
                    {
                        "label": trace.label,
                        "anchor": trace.anchor,
                        "chapter": trace.chapter,
                        "path": trace.path,
                    }
                    for trace in traces
                ],
            }
            for record, traces in registry.traces_for(target.id)
        ]
        targets.append(
            {
                "id": target.id,
                "name": target.name,
                "trace_count": target.trace_count,
                "records": records,
            }
        )
    return {"schema_version": REPORT_SCHEMA_VERSION, "targets": targets}


def validate_report(report: dict[str, Any]) -> list[str]:
    schema = json.loads(REPORT_SCHEMA_PATH.read_text(encoding="utf-8"))
    validator = Draft202012Validator(schema)
    errors = sorted(
        validator.iter_errors(report), key=lambda err: list(err.absolute_path)
    )
    return [err.message for err in errors]


def emit_report(registry: TraceRegistry, path: Path) -> dict[str, Any]:
    report = build_report(registry)
    errors = validate_report(report)
    if errors:
        details = "\n".join(f"- {message}" for message in errors)
        raise TraceError(f"trace report schema validation failed:\n{details}")
    _write_json(path, report)
    return report
