from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from helpers import mdbook_payload
from mdbook_trace import cli
from mdbook_trace.book import Book


def _run_stdin(
    monkeypatch: pytest.MonkeyPatch, payload: object, argv: list[str] | None = None
) -> int:
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(payload)))
    return cli.main(argv or [])


def test_supports(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["supports", "html"]) == 0
    assert cli.main(["supports", "markdown"]) == 0
    assert cli.main(["supports", "not-supported"]) == 1


def test_preprocess_round_trip(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    scenario_book: Book,
) -> None:
    code = _run_stdin(monkeypatch, mdbook_payload(scenario_book))
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    intro, matrix = (section["Chapter"] for section in out["sections"])
    assert intro["number"] == [1]
    assert '<sup>1</sup> My Document ID-1.2' in intro["content"]
    assert "| ID-1.2 | [1.1](intro.md#trace1_1) |" in matrix["content"]


def test_preprocess_failure_writes_nothing(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    scenario_book: Book,
) -> None:
    payload = mdbook_payload(scenario_book, {"targets": {"other": "Other"}})
    assert _run_stdin(monkeypatch, payload) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "no target defined with id 'mydoc'" in captured.err


def test_render_with_yaml_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], scenario_book: Book
) -> None:
    payload_path = tmp_path / "payload.json"
    payload_path.write_text(
        json.dumps(mdbook_payload(scenario_book, {"targets": {}})), encoding="utf-8"
    )
    config_path = tmp_path / "trace.yml"
    config_path.write_text(
        "qualified-footnotes: true\ntargets:\n  mydoc: My Document\n",
        encoding="utf-8",
    )
    out_path = tmp_path / "out" / "book.json"
    code = cli.main(
        [
            "render",
            "--book",
            str(payload_path),
            "--config",
            str(config_path),
            "--output",
            str(out_path),
        ]
    )
    assert code == 0
    rendered = json.loads(out_path.read_text(encoding="utf-8"))
    intro = rendered["sections"][0]["Chapter"]
    assert "<sup>1.1</sup> My Document ID-1.2" in intro["content"]


def test_report_command(tmp_path: Path, scenario_book: Book) -> None:
    payload_path = tmp_path / "payload.json"
    payload_path.write_text(json.dumps(mdbook_payload(scenario_book)), encoding="utf-8")
    report_path = tmp_path / "report.json"
    code = cli.main(
        ["report", "--book", str(payload_path), "--output", str(report_path)]
    )
    assert code == 0
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["targets"][0]["records"][0]["id"] == "ID-1.2"


def test_missing_payload_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(["render", "--book", str(tmp_path / "missing.json")])
    assert code == 1
    assert "failed to read payload" in capsys.readouterr().err


def test_report_requires_output() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["report", "--book", "payload.json"])
    assert excinfo.value.code == 2


def test_failure_is_reported_at_any_log_level(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    scenario_book: Book,
) -> None:
    monkeypatch.setenv("MDBOOK_TRACE_LOG", "CRITICAL")
    payload = mdbook_payload(scenario_book, {"targets": {"other": "Other"}})
    assert _run_stdin(monkeypatch, payload) == 1
    assert "no target defined with id 'mydoc'" in capsys.readouterr().err
