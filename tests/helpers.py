from __future__ import annotations

from typing import Any

from mdbook_trace.book import Book, Chapter
from mdbook_trace.config import TraceConfig


def chapter(
    name: str, content: str = "", *children: Chapter, path: str | None = ""
) -> Chapter:
    if path == "":
        path = f"{name.lower().replace(' ', '_')}.md"
    return Chapter(name=name, content=content, sub_items=list(children), path=path)


def make_config(**overrides: Any) -> TraceConfig:
    raw: dict[str, Any] = {"targets": {"mydoc": {"name": "My Document"}}}
    raw.update({key.replace("_", "-"): value for key, value in overrides.items()})
    return TraceConfig.from_mapping(raw)


def mdbook_payload(book: Book, trace_config: dict[str, Any] | None = None) -> list[Any]:
    if trace_config is None:
        trace_config = {"targets": {"mydoc": {"name": "My Document"}}}
    context = {
        "root": "/book",
        "renderer": "html",
        "mdbook_version": "0.4.40",
        "config": {
            "book": {"title": "Test"},
            "preprocessor": {"trace": trace_config},
        },
    }
    return [context, book.to_json()]
