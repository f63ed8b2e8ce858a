from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import doctor


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m search_query.config",
        description="Inspect the settings search-query builds filters with.",
    )
    subparsers = parser.add_subparsers(dest="command")

    doctor_parser = subparsers.add_parser(
        "doctor", help="Load every configuration source and print the effective query settings."
    )
    doctor_parser.add_argument("--env-file", type=Path, help="Read this .env file instead.")
    doctor_parser.add_argument(
        "--config-file", type=Path, help="Read this config.toml instead of the personal one."
    )

    args = parser.parse_args(argv)
    if args.command != "doctor":
        parser.print_help()
        return 1
    return 0 if doctor(env_file=args.env_file, config_file=args.config_file) else 1


if __name__ == "__main__":
    sys.exit(main())
