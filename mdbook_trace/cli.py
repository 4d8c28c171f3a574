"""Command line entry point for the mdBook trace preprocessor."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .book import Book
from .config import load_config_file
from .constants import LOG_LEVEL_ENV_VAR, UNSUPPORTED_RENDERERS
from .engine import TracePreprocessor
from .errors import TraceError
from .outputs import emit_report
from .protocol import (
    check_mdbook_version,
    config_from_context,
    parse_payload,
    read_payload,
    write_book,
)

LOGGER = logging.getLogger("mdbook_trace")


class ExitCode:
    SUCCESS = 0
    FAILURE = 1
    USAGE = 2


def _configure_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_ENV_VAR, "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    if not isinstance(level, int):
        level = logging.WARNING
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("mdbook-trace: %(message)s"))
    LOGGER.handlers = [handler]
    LOGGER.setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdbook-trace",
        description=(
            "mdBook preprocessor numbering trace markers and rendering trace "
            "matrices (reads [context, book] from stdin when no command is given)"
        ),
    )
    sub = parser.add_subparsers(dest="command")

    p_supports = sub.add_parser(
        "supports", help="Exit 0 if the given renderer is supported."
    )
    p_supports.add_argument("renderer")

    for name, help_text in (
        ("render", "Process a saved preprocessor payload offline."),
        ("report", "Write the trace registry of a saved payload as JSON."),
    ):
        p_offline = sub.add_parser(name, help=help_text)
        p_offline.add_argument(
            "--book", required=True, help="Saved [context, book] JSON payload"
        )
        p_offline.add_argument(
            "--config", default="", help="YAML trace config overriding the payload's"
        )
        p_offline.add_argument(
            "--output",
            required=(name == "report"),
            default="",
            help="Output path (render defaults to stdout)",
        )
    return parser


def cmd_supports(args: argparse.Namespace) -> int:
    if args.renderer in UNSUPPORTED_RENDERERS:
        return ExitCode.FAILURE
    return ExitCode.SUCCESS


def cmd_preprocess(_: argparse.Namespace) -> int:
    context, book = read_payload(sys.stdin)
    check_mdbook_version(context)
    processed = TracePreprocessor(config_from_context(context)).run(book)
    write_book(sys.stdout, processed)
    return ExitCode.SUCCESS


def _load_offline(args: argparse.Namespace) -> tuple[TracePreprocessor, Book]:
    book_path = Path(args.book)
    try:
        payload = json.loads(book_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise TraceError(f"failed to read payload {book_path}: {exc}") from exc
    context, book = parse_payload(payload)
    if args.config:
        config = load_config_file(Path(args.config))
    else:
        config = config_from_context(context)
    return TracePreprocessor(config), book


def cmd_render(args: argparse.Namespace) -> int:
    preprocessor, book = _load_offline(args)
    processed = preprocessor.run(book)
    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        with output.open("w", encoding="utf-8") as handle:
            write_book(handle, processed)
        LOGGER.info("wrote processed book to %s", output)
    else:
        write_book(sys.stdout, processed)
    return ExitCode.SUCCESS


def cmd_report(args: argparse.Namespace) -> int:
    preprocessor, book = _load_offline(args)
    preprocessor.run(book)
    report = emit_report(preprocessor.registry, Path(args.output))
    LOGGER.info(
        "wrote trace report for %d targets to %s", len(report["targets"]), args.output
    )
    return ExitCode.SUCCESS


HANDLERS = {
    None: cmd_preprocess,
    "supports": cmd_supports,
    "render": cmd_render,
    "report": cmd_report,
}


def main(argv: list[str] | None = None) -> int:
    _configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return HANDLERS[args.command](args)
    except TraceError as exc:
        LOGGER.critical("%s", exc)
        return ExitCode.FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
