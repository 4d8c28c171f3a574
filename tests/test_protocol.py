from __future__ import annotations

import io
import json

import pytest

from helpers import chapter, mdbook_payload
from mdbook_trace.book import Book, PartTitle, Separator
from mdbook_trace.config import ParentNumbering, TargetConfig
from mdbook_trace.errors import ProtocolError
from mdbook_trace.protocol import (
    check_mdbook_version,
    config_from_context,
    parse_payload,
    read_payload,
    write_book,
)

RAW_BOOK = {
    "sections": [
        {
            "Chapter": {
                "name": "Preface",
                "content": "# Preface\n",
                "number": None,
                "sub_items": [],
                "path": "preface.md",
                "source_path": "preface.md",
                "parent_names": [],
            }
        },
        {"PartTitle": "Guide"},
        {
            "Chapter": {
                "name": "Intro",
                "content": "# Intro\n",
                "number": [1],
                "sub_items": [
                    {
                        "Chapter": {
                            "name": "Draft",
                            "content": "",
                            "number": [1, 1],
                            "sub_items": [],
                            "path": None,
                            "source_path": None,
                            "parent_names": ["Intro"],
                        }
                    }
                ],
                "path": "intro.md",
                "source_path": "intro.md",
                "parent_names": [],
            }
        },
        "Separator",
    ],
    "__non_exhaustive": None,
}


def test_book_round_trips_through_json() -> None:
    book = Book.from_json(RAW_BOOK)
    preface, part, intro, separator = book.sections
    assert preface.numbered is False
    assert isinstance(part, PartTitle) and part.title == "Guide"
    assert isinstance(separator, Separator)
    assert intro.subchapters[0].path is None
    assert intro.subchapters[0].extra["parent_names"] == ["Intro"]
    assert book.to_json() == RAW_BOOK


def test_parse_payload_accepts_pair_and_bare_book() -> None:
    context, book = parse_payload([{"renderer": "html"}, RAW_BOOK])
    assert context == {"renderer": "html"}
    assert [item.name for item in book.iter_chapters()] == ["Preface", "Intro", "Draft"]

    context, book = parse_payload(RAW_BOOK)
    assert context == {}


@pytest.mark.parametrize(
    "payload",
    [
        "text",
        [1, 2, 3],
        [{}, {"no": "sections"}],
        [{}, {"sections": [{"Unknown": {}}]}],
        [{}, {"sections": [{"Chapter": {"content": "x"}}]}],
    ],
)
def test_invalid_payloads_are_rejected(payload: object) -> None:
    with pytest.raises(ProtocolError):
        parse_payload(payload)


def test_read_payload_rejects_invalid_json() -> None:
    with pytest.raises(ProtocolError):
        read_payload(io.StringIO("[{}, "))


def test_read_and_write_streams() -> None:
    book = Book(sections=[chapter("Intro", "text")])
    stream = io.StringIO(json.dumps(mdbook_payload(book)))
    context, parsed = read_payload(stream)
    assert context["renderer"] == "html"

    out = io.StringIO()
    write_book(out, parsed)
    assert json.loads(out.getvalue()) == book.to_json()


def test_config_is_read_from_preprocessor_table() -> None:
    context = mdbook_payload(
        Book(),
        {"parent-numbering": "offset", "targets": {"mydoc": "My Document"}},
    )[0]
    config = config_from_context(context)
    assert config.parent_numbering is ParentNumbering.OFFSET
    assert config.targets == (TargetConfig("mydoc", "My Document"),)


def test_missing_preprocessor_table_uses_defaults() -> None:
    config = config_from_context({"config": {"book": {}}})
    assert config.targets == ()


@pytest.mark.parametrize(
    "version, supported",
    [("0.4.40", True), ("0.4", True), ("", True), ("0.5.0", False), ("garbage", False)],
)
def test_mdbook_version_check(version: str, supported: bool) -> None:
    assert check_mdbook_version({"mdbook_version": version}) is supported
