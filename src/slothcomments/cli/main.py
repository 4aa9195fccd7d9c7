"""
sloth-comments command line.

Usage:
    sloth-comments generate [OUTPUT_DIR] [options]
    sloth-comments languages
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from slothcomments import __version__
from slothcomments.aggregator import ServicePolicy
from slothcomments.generate import FORMAT_EXTENSIONS
from slothcomments.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sloth-comments",
        description="Generate Sloth SLO specifications from source code comments",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    generate_parser = subparsers.add_parser(
        "generate", help="Generate the Sloth specification from source comments"
    )
    generate_parser.add_argument(
        "output_dir", nargs="?", help="Directory for generated files (default: cwd)"
    )
    generate_parser.add_argument(
        "-l", "--lang", dest="language", help="Source language (default: go)"
    )
    generate_parser.add_argument(
        "-d",
        "--dirs",
        dest="include_dirs",
        action="append",
        help="Directory to scan (repeatable, default: .)",
    )
    generate_parser.add_argument(
        "-f",
        "--format",
        dest="formats",
        action="append",
        choices=sorted(FORMAT_EXTENSIONS),
        help="Output format (repeatable, default: yaml)",
    )
    generate_parser.add_argument(
        "--stdout",
        action="store_true",
        default=None,
        help="Write the specification to standard output",
    )
    generate_parser.add_argument(
        "--service-policy",
        choices=[policy.value for policy in ServicePolicy],
        help="How repeated service directives are handled (default: last-write-wins)",
    )
    generate_parser.add_argument("--workers", type=int, help="Threads used to parse files")
    generate_parser.add_argument(
        "--strict",
        action="store_true",
        help="Write nothing and exit non-zero if any directive is rejected",
    )
    generate_parser.add_argument("--config", dest="config_file", help="YAML config file")
    generate_parser.add_argument("--log-level", help="Log level (default: INFO)")
    generate_parser.add_argument(
        "--log-json", action="store_true", default=None, help="Render logs as JSON"
    )

    subparsers.add_parser("languages", help="List supported source languages")

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging()

    if args.command == "generate":
        from slothcomments.cli.generate import generate_command

        sys.exit(
            generate_command(
                args.output_dir,
                language=args.language,
                include_dirs=args.include_dirs,
                formats=args.formats,
                stdout=args.stdout,
                service_policy=args.service_policy,
                workers=args.workers,
                strict=args.strict,
                config_file=args.config_file,
                log_level=args.log_level,
                log_json=args.log_json,
            )
        )

    if args.command == "languages":
        from slothcomments.cli.languages import list_languages_command

        sys.exit(list_languages_command())

    parser.print_help()
    sys.exit(1)


if __name__ == "__main__":
    main()
