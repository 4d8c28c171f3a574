from __future__ import annotations

import posixpath
from typing import Sequence

from .book import Chapter
from .config import TraceConfig
from .registry import TraceRegistry
from .scanner import MATRIX, ScanResult, find_title
from .types import Trace

MATRIX_RULE = "|--------|--------|"
FOOTNOTE_DIVIDER = "\n\n---\n\n"


def trace_reference(trace: Trace, qualified: bool) -> str:
    return (
        f'<a name="{trace.anchor}"></a>'
        f'<a href="#{trace.note}"><sup>{trace.footnote_label(qualified)}</sup></a>'
    )


def footnote_definition(trace: Trace, target_name: str, qualified: bool) -> str:
    return (
        f'<a name="{trace.note}"></a><sup>{trace.footnote_label(qualified)}</sup> '
        f"{target_name} {trace.record}"
    )


def append_footnotes(body: str, definitions: Sequence[str], divider: bool) -> str:
    if not definitions:
        return body
    footer = "\n\n".join(definitions)
    separator = FOOTNOTE_DIVIDER if divider else "\n\n"
    return body + separator + footer


def _relative_link(path: str, page_path: str | None) -> str:
    if page_path is None:
        return path
    if path == page_path:
        return ""
    page_dir = posixpath.dirname(page_path) or "."
    return posixpath.relpath(path, start=page_dir)


def trace_link(trace: Trace, page_path: str | None) -> str:
    if trace.path is None:
        return trace.label
    href = _relative_link(trace.path, page_path)
    return f"[{trace.label}]({href}#{trace.anchor})"


def _table_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def trace_matrix(
    registry: TraceRegistry,
    target: str,
    page_path: str | None,
    record_heading: str,
    trace_heading: str,
) -> str:
    rows = [
        f"| {record_heading} | {trace_heading} |",
        MATRIX_RULE,
    ]
    for record, traces in registry.traces_for(target):
        links = ", ".join(trace_link(trace, page_path) for trace in traces)
        rows.append(f"| {_table_cell(record)} | {links} |")
    return "\n".join(rows)


def number_title(text: str, chapter: Chapter) -> str:
    if not chapter.number:
        return text
    found = find_title(text)
    if found is None:
        return text
    start, end, title = found
    return f"{text[:start]}# {chapter.label} {title}{text[end:]}"


def render_chapter(
    chapter: Chapter,
    scan: ScanResult,
    traces: Sequence[Trace],
    registry: TraceRegistry,
    config: TraceConfig,
) -> str:
    """Substitute every located marker and append the page footnotes.

    ``traces`` holds the numbered traces of ``scan.traces`` in the same order.
    """
    text = chapter.content
    pending_traces = iter(traces)
    edits: list[tuple[int, int, str]] = [
        (offset, offset + 1, "") for offset in scan.escapes
    ]
    definitions: list[str] = []

    for marker in scan.markers:
        if marker.kind == MATRIX:
            replacement = trace_matrix(
                registry,
                marker.target,
                chapter.path,
                config.record_heading,
                config.trace_heading,
            )
        else:
            trace = next(pending_traces)
            replacement = trace_reference(trace, config.qualified_footnotes)
            definitions.append(
                footnote_definition(
                    trace,
                    registry.target(trace.target).name,
                    config.qualified_footnotes,
                )
            )
        edits.append((marker.start, marker.end, replacement))

    pieces: list[str] = []
    cursor = 0
    for start, end, replacement in sorted(edits):
        pieces.append(text[cursor:start])
        pieces.append(replacement)
        cursor = end
    pieces.append(text[cursor:])

    body = append_footnotes("".join(pieces), definitions, config.footnote_divider)
    if config.chapter_numbers:
        body = number_title(body, chapter)
    return body
