from __future__ import annotations

from .book import Book, BookItem, Chapter
from .config import ParentNumbering


def assign_chapter_numbers(book: Book) -> None:
    """Number chapters depth-first, siblings counting up from 1.

    Unnumbered (prefix and suffix) chapters keep an empty number and do not
    consume a sibling position.
    """
    _assign(book.sections, ())


def _assign(items: list[BookItem], parent: tuple[int, ...]) -> None:
    position = 0
    for item in items:
        if not isinstance(item, Chapter):
            continue
        if item.numbered:
            position += 1
            item.number = (*parent, position)
        else:
            item.number = ()
        _assign(item.sub_items, item.number)


def trace_prefix(chapter: Chapter, policy: ParentNumbering) -> tuple[int, ...]:
    if policy is ParentNumbering.ZERO and chapter.subchapters:
        return (*chapter.number, 0)
    return chapter.number


def first_trace_sequence(chapter: Chapter, policy: ParentNumbering) -> int:
    if policy is ParentNumbering.OFFSET:
        return 1 + len(chapter.subchapters)
    return 1


def trace_number(
    chapter: Chapter, index: int, policy: ParentNumbering
) -> tuple[int, ...]:
    """Qualified number of the ``index``-th (1-based) trace in ``chapter``."""
    sequence = first_trace_sequence(chapter, policy) + index - 1
    return (*trace_prefix(chapter, policy), sequence)
