"""`search-query` CLI entrypoint."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from datetime import UTC
from pathlib import Path
from typing import Any

from bson import json_util
from bson.errors import BSONError

from search_query.cli import _common
from search_query.config import doctor
from search_query.mongo_query import build_filter, build_search_query

PROG_NAME = "search-query"
DESCRIPTION = (
    "Translate a nested search object (MongoDB Extended JSON) into a MongoDB filter fragment."
)
EXIT_INPUT_ERROR = 3

JSON_OPTIONS = json_util.RELAXED_JSON_OPTIONS.with_options(tz_aware=True, tzinfo=UTC)

logger = logging.getLogger("search_query.cli.build")


class SearchInputError(ValueError):
    """Raised when the search object cannot be read or decoded."""


def build_parser() -> argparse.ArgumentParser:
    parser = _common.build_parser(prog=PROG_NAME, description=DESCRIPTION)
    parser.add_argument(
        "--input",
        default="-",
        help="File holding the search object, or '-' for stdin.",
    )
    parser.add_argument(
        "--filter-only",
        action="store_true",
        help="Print the bare $and fragment even when query.match_stage is enabled.",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=None,
        help="Indent the printed JSON by this many spaces.",
    )
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Print the effective query settings and exit.",
    )
    return parser


def run(args: argparse.Namespace) -> int:
    if args.check_config:
        return 0 if doctor(env_file=args.env_file, config_file=args.config) else 1

    try:
        search = read_search(args.input)
    except SearchInputError as exc:
        logger.error("Search input rejected", extra={"input": args.input, "error": str(exc)})
        return EXIT_INPUT_ERROR

    settings = args.app_config.query
    builder = build_search_query if settings.match_stage and not args.filter_only else build_filter
    result = builder(
        search,
        strip_accents=settings.strip_accents,
        regex_options=settings.regex_options,
    )
    if result is None:
        logger.info("Search produced no conditions", extra={"keys": len(search)})

    print(json_util.dumps(result, json_options=JSON_OPTIONS, indent=args.indent))
    return 0


def read_search(source: str) -> dict[str, Any]:
    """Decode the search object from ``source`` ('-' reads stdin)."""

    try:
        if source == "-":
            raw = sys.stdin.read()
        else:
            raw = Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        raise SearchInputError(f"cannot read {source}: {exc}") from exc

    if not raw.strip():
        return {}
    try:
        decoded = json_util.loads(raw, json_options=JSON_OPTIONS)
    except (ValueError, TypeError, BSONError) as exc:
        raise SearchInputError(f"invalid Extended JSON: {exc}") from exc
    if not isinstance(decoded, dict):
        raise SearchInputError(f"expected a JSON object, got {type(decoded).__name__}")
    return decoded


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    return _common.run_cli(parser, argv, cli_name="build", runner=run)


if __name__ == "__main__":  # pragma: no cover - manual execution guard
    raise SystemExit(main())


__all__ = ["SearchInputError", "build_parser", "main", "read_search", "run"]
