"""Delimiter-aware scanner for trace markers in chapter text.

The scanner walks the text once, character by character. Fenced code
blocks and inline code spans are skipped so that documentation showing the
marker syntax is left alone, and ``\\{{#trace ...}}`` is an escaped marker
which renders literally without the backslash.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .constants import MARKER_CLOSE, MARKER_OPEN, MATRIX_KEYWORDS, TRACE_KEYWORDS
from .errors import MalformedMarkerError

TRACE = "trace"
MATRIX = "matrix"

TARGET_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")
FENCE_OPEN_RE = re.compile(r"[ ]{0,3}(`{3,}|~{3,})")
TITLE_RE = re.compile(r"[ ]{0,3}#[ \t]+(?P<title>[^\n]*?)[ \t]*(?:\n|$)")

_KEYWORDS = frozenset(TRACE_KEYWORDS) | frozenset(MATRIX_KEYWORDS)


@dataclass(frozen=True)
class Marker:
    kind: str
    target: str
    record: str
    start: int
    end: int
    text: str
    line: int


@dataclass(frozen=True)
class ScanResult:
    markers: tuple[Marker, ...]
    # Offsets of backslashes to drop from escaped markers.
    escapes: tuple[int, ...]

    @property
    def traces(self) -> tuple[Marker, ...]:
        return tuple(marker for marker in self.markers if marker.kind == TRACE)

    @property
    def matrices(self) -> tuple[Marker, ...]:
        return tuple(marker for marker in self.markers if marker.kind == MATRIX)


def _line_of(text: str, index: int) -> int:
    return text.count("\n", 0, index) + 1


def _fence_end(text: str, index: int) -> int | None:
    """Return the offset just past a fenced block opening at ``index``."""
    opening = FENCE_OPEN_RE.match(text, index)
    if opening is None:
        return None
    fence = opening.group(1)
    # A backtick fence may not carry backticks in its info string.
    line_end = text.find("\n", opening.end())
    if line_end == -1:
        return len(text)
    if fence[0] == "`" and "`" in text[opening.end() : line_end]:
        return None
    closing = re.compile(
        rf"[ ]{{0,3}}{re.escape(fence[0])}{{{len(fence)},}}[ \t]*(?:\n|$)"
    )
    cursor = line_end + 1
    while cursor < len(text):
        match = closing.match(text, cursor)
        if match is not None:
            return match.end()
        next_line = text.find("\n", cursor)
        if next_line == -1:
            break
        cursor = next_line + 1
    return len(text)


def _paragraph_end(text: str, index: int) -> int:
    """Return the offset of the line break ending the paragraph at ``index``.

    A paragraph ends at a blank line or before a line opening a fenced block.
    """
    cursor = text.find("\n", index)
    while cursor != -1:
        line_start = cursor + 1
        line_end = text.find("\n", line_start)
        if line_end == -1:
            line_end = len(text)
        if not text[line_start:line_end].strip():
            return cursor
        if _fence_end(text, line_start) is not None:
            return cursor
        cursor = text.find("\n", line_start)
    return len(text)


def _code_span_end(text: str, index: int) -> tuple[int, bool]:
    run = index
    while run < len(text) and text[run] == "`":
        run += 1
    width = run - index
    # Code spans never cross a paragraph; an unclosed run is literal text.
    limit = _paragraph_end(text, run)
    cursor = run
    while cursor < limit:
        found = text.find("`", cursor, limit)
        if found == -1:
            break
        end = found
        while end < limit and text[end] == "`":
            end += 1
        if end - found == width:
            return end, True
        cursor = end
    return run, False


def _keyword_at(text: str, index: int) -> tuple[str, int] | None:
    start = index + len(MARKER_OPEN)
    end = start
    while end < len(text) and (text[end].isalnum() or text[end] == "_"):
        end += 1
    keyword = text[start:end]
    if keyword not in _KEYWORDS:
        return None
    if end < len(text) and not (text[end].isspace() or text[end] == "}"):
        return None
    return keyword, end


def _parse_marker(text: str, index: int, keyword: str, body_start: int) -> Marker:
    line = _line_of(text, index)
    close = text.find(MARKER_CLOSE, body_start)
    if close == -1:
        snippet = text[index : index + 60].split("\n", 1)[0]
        raise MalformedMarkerError("unterminated marker", marker=snippet, line=line)

    end = close + len(MARKER_CLOSE)
    raw = text[index:end]
    body = text[body_start:close].strip()

    if keyword in MATRIX_KEYWORDS:
        if not body:
            raise MalformedMarkerError(
                "matrix marker has no target", marker=raw, line=line
            )
        if not TARGET_ID_RE.match(body):
            raise MalformedMarkerError(
                f"invalid target id '{body}'", marker=raw, line=line
            )
        return Marker(MATRIX, body, "", index, end, raw, line)

    target, colon, record = body.partition(":")
    target = target.strip()
    record = record.strip()
    if not target:
        raise MalformedMarkerError("trace marker has no target", marker=raw, line=line)
    if not colon:
        raise MalformedMarkerError(
            "trace marker must have the form <target>:<record>", marker=raw, line=line
        )
    if not TARGET_ID_RE.match(target):
        raise MalformedMarkerError(
            f"invalid target id '{target}'", marker=raw, line=line
        )
    if not record:
        raise MalformedMarkerError("trace marker has no record", marker=raw, line=line)
    return Marker(TRACE, target, record, index, end, raw, line)


def scan_markers(text: str) -> ScanResult:
    markers: list[Marker] = []
    escapes: list[int] = []
    index = 0
    length = len(text)

    while index < length:
        if index == 0 or text[index - 1] == "\n":
            fence_end = _fence_end(text, index)
            if fence_end is not None:
                index = fence_end
                continue

        char = text[index]
        if char == "`":
            index, _ = _code_span_end(text, index)
            continue

        if char == "\\" and text.startswith(MARKER_OPEN, index + 1):
            found = _keyword_at(text, index + 1)
            if found is not None:
                escapes.append(index)
                index = found[1]
                continue

        if char == "{" and text.startswith(MARKER_OPEN, index):
            found = _keyword_at(text, index)
            if found is None:
                index += len(MARKER_OPEN)
                continue
            keyword, body_start = found
            marker = _parse_marker(text, index, keyword, body_start)
            markers.append(marker)
            index = marker.end
            continue

        index += 1

    return ScanResult(markers=tuple(markers), escapes=tuple(escapes))


def find_title(text: str) -> tuple[int, int, str] | None:
    """Locate the first level-one ATX heading outside fenced code."""
    index = 0
    while index < len(text):
        fence_end = _fence_end(text, index)
        if fence_end is not None:
            index = fence_end
            continue
        match = TITLE_RE.match(text, index)
        if match is not None:
            title_end = match.end("title")
            return match.start(), title_end, match.group("title")
        next_line = text.find("\n", index)
        if next_line == -1:
            return None
        index = next_line + 1
    return None
