from __future__ import annotations

import pytest

from helpers import chapter, make_config
from mdbook_trace.book import Book
from mdbook_trace.config import TraceConfig


@pytest.fixture
def config() -> TraceConfig:
    return make_config()


@pytest.fixture
def scenario_book() -> Book:
    return Book(
        sections=[
            chapter(
                "Intro", "# Intro\n\nSome traceable text {{#trace mydoc:ID-1.2 }}\n"
            ),
            chapter("My Document", "# My Document\n\n{{#tracematrix mydoc }}\n"),
        ]
    )
