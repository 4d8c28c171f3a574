"""mdBook preprocessor protocol: ``[context, book]`` in, book out."""

from __future__ import annotations

import json
import logging
import re
from typing import IO, Any

from .book import Book
from .config import TraceConfig
from .constants import CONFIG_SECTION, PREPROCESSOR_NAME, SUPPORTED_MDBOOK_VERSION
from .errors import ProtocolError

LOGGER = logging.getLogger(__name__)

VERSION_RE = re.compile(r"^(\d+)\.(\d+)(?:\.(\d+))?")


def parse_payload(payload: Any) -> tuple[dict[str, Any], Book]:
    """Split a decoded payload into its context and book.

    A bare book object is accepted as well and gets an empty context.
    """
    if isinstance(payload, list):
        if len(payload) != 2 or not isinstance(payload[0], dict):
            raise ProtocolError("expected a [context, book] pair")
        context, raw_book = payload
    elif isinstance(payload, dict):
        context, raw_book = {}, payload
    else:
        raise ProtocolError("payload must be a JSON array or object")
    return context, Book.from_json(raw_book)


def read_payload(stream: IO[str]) -> tuple[dict[str, Any], Book]:
    try:
        payload = json.load(stream)
    except json.JSONDecodeError as exc:
        raise ProtocolError(f"failed to parse preprocessor input: {exc}") from exc
    return parse_payload(payload)


def write_book(stream: IO[str], book: Book) -> None:
    json.dump(book.to_json(), stream, separators=(",", ":"))
    stream.flush()


def config_from_context(context: dict[str, Any]) -> TraceConfig:
    preprocessors = (context.get("config") or {}).get("preprocessor") or {}
    raw = preprocessors.get(CONFIG_SECTION)
    if raw is None:
        LOGGER.warning(
            "no [preprocessor.%s] table in book config; using defaults", CONFIG_SECTION
        )
    return TraceConfig.from_mapping(raw)


def check_mdbook_version(context: dict[str, Any]) -> bool:
    version = str(context.get("mdbook_version", "")).strip()
    if not version:
        return True
    match = VERSION_RE.match(version)
    supported = ".".join(str(part) for part in SUPPORTED_MDBOOK_VERSION)
    found = (int(match.group(1)), int(match.group(2))) if match else None
    if found != SUPPORTED_MDBOOK_VERSION:
        LOGGER.warning(
            "The %s plugin supports mdbook %s.x, "
            "but we're being called from version %s",
            PREPROCESSOR_NAME,
            supported,
            version,
        )
        return False
    return True
