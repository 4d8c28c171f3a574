"""In-memory chapter tree and its mdBook JSON representation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Union

from .errors import ProtocolError

_MANAGED_CHAPTER_KEYS = ("name", "content", "number", "sub_items", "path")


@dataclass
class Separator:
    pass


@dataclass
class PartTitle:
    title: str


@dataclass
class Chapter:
    name: str
    content: str = ""
    sub_items: list[BookItem] = field(default_factory=list)
    path: str | None = None
    numbered: bool = True
    number: tuple[int, ...] = ()
    trace_count: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def subchapters(self) -> list[Chapter]:
        return [item for item in self.sub_items if isinstance(item, Chapter)]

    @property
    def label(self) -> str:
        return ".".join(str(part) for part in self.number)

    def describe(self) -> str:
        if self.path:
            return f"{self.name} ({self.path})"
        return self.name


BookItem = Union[Chapter, Separator, PartTitle]


@dataclass
class Book:
    sections: list[BookItem] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def iter_chapters(self) -> Iterator[Chapter]:
        """Yield every chapter depth-first, parents before their children."""
        yield from _walk(self.sections)

    @classmethod
    def from_json(cls, payload: Any) -> Book:
        if not isinstance(payload, dict) or not isinstance(
            payload.get("sections"), list
        ):
            raise ProtocolError("book payload must be an object with a 'sections' list")
        extra = {key: value for key, value in payload.items() if key != "sections"}
        return cls(
            sections=[_item_from_json(item) for item in payload["sections"]],
            extra=extra,
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "sections": [_item_to_json(item) for item in self.sections],
            **self.extra,
        }


def _walk(items: list[BookItem]) -> Iterator[Chapter]:
    for item in items:
        if isinstance(item, Chapter):
            yield item
            yield from _walk(item.sub_items)


def _item_from_json(raw: Any) -> BookItem:
    if raw == "Separator":
        return Separator()
    if isinstance(raw, dict) and "PartTitle" in raw:
        return PartTitle(str(raw["PartTitle"]))
    if isinstance(raw, dict) and isinstance(raw.get("Chapter"), dict):
        return _chapter_from_json(raw["Chapter"])
    raise ProtocolError(f"unrecognised book item: {str(raw)[:80]}")


def _chapter_from_json(raw: dict[str, Any]) -> Chapter:
    name = raw.get("name")
    if not isinstance(name, str):
        raise ProtocolError("chapter is missing its name")
    number = raw.get("number")
    return Chapter(
        name=name,
        content=str(raw.get("content") or ""),
        sub_items=[_item_from_json(item) for item in raw.get("sub_items") or []],
        path=raw.get("path"),
        numbered=number is not None,
        number=tuple(number or ()),
        extra={
            key: value
            for key, value in raw.items()
            if key not in _MANAGED_CHAPTER_KEYS
        },
    )


def _item_to_json(item: BookItem) -> Any:
    if isinstance(item, Separator):
        return "Separator"
    if isinstance(item, PartTitle):
        return {"PartTitle": item.title}
    return {"Chapter": _chapter_to_json(item)}


def _chapter_to_json(chapter: Chapter) -> dict[str, Any]:
    return {
        "name": chapter.name,
        "content": chapter.content,
        "number": list(chapter.number) if chapter.numbered else None,
        "sub_items": [_item_to_json(item) for item in chapter.sub_items],
        "path": chapter.path,
        **chapter.extra,
    }
