"""Two-pass trace preprocessing over a whole book."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from .book import Book, Chapter
from .config import TraceConfig
from .errors import MarkerError, TraceError, UnknownTargetError
from .numbering import assign_chapter_numbers, trace_number
from .registry import TraceRegistry
from .render import render_chapter
from .scanner import ScanResult, scan_markers
from .types import Trace

LOGGER = logging.getLogger(__name__)


class RunState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    PASS1_NUMBERING = "pass1-numbering"
    PASS1_REGISTERING = "pass1-registering"
    PASS2_RENDERING = "pass2-rendering"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ChapterScan:
    chapter: Chapter
    scan: ScanResult
    traces: tuple[Trace, ...]


class TracePreprocessor:
    def __init__(self, config: TraceConfig) -> None:
        self.config = config
        self.registry = TraceRegistry(config.targets)
        self.state = RunState.UNINITIALIZED

    def run(self, book: Book) -> Book:
        if self.state is not RunState.UNINITIALIZED:
            raise TraceError(f"preprocessor already used (state: {self.state.value})")
        try:
            self.state = RunState.PASS1_NUMBERING
            assign_chapter_numbers(book)

            self.state = RunState.PASS1_REGISTERING
            scans = [self._register(chapter) for chapter in book.iter_chapters()]
            self.registry.freeze()
            LOGGER.debug(
                "registered %d traces across %d chapters",
                sum(target.trace_count for target in self.registry),
                len(scans),
            )

            self.state = RunState.PASS2_RENDERING
            rendered = [
                (
                    item.chapter,
                    render_chapter(
                        item.chapter, item.scan, item.traces, self.registry, self.config
                    ),
                )
                for item in scans
            ]
        except Exception:
            self.state = RunState.FAILED
            raise

        for chapter, content in rendered:
            chapter.content = content
        self.state = RunState.DONE
        return book

    def _register(self, chapter: Chapter) -> ChapterScan:
        try:
            scan = scan_markers(chapter.content)
            for marker in scan.markers:
                if marker.target not in self.registry:
                    raise UnknownTargetError(
                        marker.target, marker=marker.text, line=marker.line
                    )

            traces: list[Trace] = []
            for index, marker in enumerate(scan.traces, start=1):
                trace = Trace(
                    target=marker.target,
                    record=marker.record,
                    chapter=chapter.name,
                    path=chapter.path,
                    number=trace_number(chapter, index, self.config.parent_numbering),
                    footnote=index,
                )
                self.registry.record_trace(marker.target, marker.record, trace)
                traces.append(trace)
        except MarkerError as exc:
            exc.located(chapter.describe())
            raise

        chapter.trace_count = len(traces)
        return ChapterScan(chapter=chapter, scan=scan, traces=tuple(traces))
