"""Utilities shared by CLI entrypoints."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, cast

from search_query.config import ConfigError, load_config
from search_query.logging import configure_logging

if TYPE_CHECKING:
    from search_query.config import AppConfig


LOG_LEVEL_CHOICES = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")
LOG_FORMAT_CHOICES = ("text", "json")
LOG_DESTINATION_CHOICES = ("auto", "stdout", "stderr")

EXIT_CONFIG_ERROR = 2


CliRunner = Callable[[argparse.Namespace], int]


class CLIArgs(argparse.Namespace):
    log_level: str
    log_format: str
    log_destination: str
    config: Path | None
    env_file: Path | None
    app_config: AppConfig


def build_parser(*, prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description=description,
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a TOML configuration file overriding defaults.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Optional .env file with SEARCH_QUERY_* settings.",
    )
    parser.add_argument(
        "--log-level",
        type=_choice_type(LOG_LEVEL_CHOICES, "log level", str.upper),
        choices=LOG_LEVEL_CHOICES,
        default="WARNING",
        help="Logging verbosity (case-insensitive).",
    )
    parser.add_argument(
        "--log-format",
        type=_choice_type(LOG_FORMAT_CHOICES, "log format", str.lower),
        choices=LOG_FORMAT_CHOICES,
        default="text",
        help="Structured JSON or human-readable text logs.",
    )
    parser.add_argument(
        "--log-destination",
        type=_choice_type(LOG_DESTINATION_CHOICES, "log destination", str.lower),
        choices=LOG_DESTINATION_CHOICES,
        default="stderr",
        help="Write logs to stdout, stderr, or split automatically by level.",
    )
    return parser


def run_cli(
    parser: argparse.ArgumentParser,
    argv: Sequence[str] | None,
    *,
    cli_name: str,
    runner: CliRunner,
) -> int:
    args = cast(CLIArgs, parser.parse_args(argv))
    configure_logging(
        level=args.log_level,
        fmt=args.log_format,
        destination=args.log_destination,
    )
    logger = logging.getLogger(f"search_query.cli.{cli_name}")
    try:
        config = load_config(env_file=args.env_file, config_file=args.config)
    except ConfigError as exc:
        logger.error(
            "Configuration invalid",
            extra={"cli": cli_name, "error": str(exc)},
        )
        return EXIT_CONFIG_ERROR

    args.app_config = config
    logger.debug("Configuration loaded", extra={"cli": cli_name, **vars(config.query)})
    return runner(args)


def _choice_type(
    choices: Sequence[str], label: str, normalize: Callable[[str], str]
) -> Callable[[str], str]:
    def _convert(value: str) -> str:
        normalized = normalize(value)
        if normalized not in choices:
            raise argparse.ArgumentTypeError(
                f"Invalid {label} '{value}'. Expected one of: {', '.join(choices)}"
            )
        return normalized

    return _convert


__all__ = [
    "CLIArgs",
    "CliRunner",
    "EXIT_CONFIG_ERROR",
    "build_parser",
    "run_cli",
]
