"""
Generate specification command.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from slothcomments.aggregator import SpecAggregator
from slothcomments.cli.ux import (
    console,
    error,
    print_problems,
    print_run_header,
    print_specification_summary,
    success,
)
from slothcomments.config import load_settings
from slothcomments.core.errors import (
    ConfigurationError,
    ExitCode,
    SourceError,
    ValidationError,
    main_with_error_handling,
)
from slothcomments.generate import write_specification
from slothcomments.logging import configure_logging, run_context
from slothcomments.sources import get_adapter

logger = structlog.get_logger()


@main_with_error_handling(report=error)
def generate_command(
    output_dir: str | None = None,
    *,
    language: str | None = None,
    include_dirs: list[str] | None = None,
    formats: list[str] | None = None,
    stdout: bool | None = None,
    service_policy: str | None = None,
    workers: int | None = None,
    strict: bool = False,
    config_file: str | None = None,
    log_level: str | None = None,
    log_json: bool | None = None,
) -> int:
    """
    Generate a Sloth specification from source code comments.

    Args:
        output_dir: Directory for generated files (cwd when omitted)
        language: Source adapter name (go, python)
        include_dirs: Root directories to scan
        formats: Output formats (yaml, json)
        stdout: Write the specification to standard output instead of files
        service_policy: last-write-wins or reject-conflict
        workers: Threads used to parse files
        strict: Fail without writing if any directive was dropped
        config_file: Optional YAML config file
        log_level: Log level name
        log_json: Render logs as JSON

    Returns:
        Exit code (0 = success)
    """
    settings = load_settings(
        config_file,
        language=language,
        include_dirs=include_dirs,
        formats=formats,
        stdout=stdout,
        service_policy=service_policy,
        workers=workers,
        log_level=log_level,
        log_json=log_json,
    )
    try:
        configure_logging(settings.log_level, json_logs=settings.log_json)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    adapter = get_adapter(settings.language)
    aggregator = SpecAggregator(policy=settings.service_policy, workers=settings.workers)

    with run_context(command="generate", language=adapter.name):
        print_run_header(adapter.name, settings.include_dirs)

        try:
            spec = aggregator.aggregate(adapter.collect(settings.include_dirs))
        except OSError as exc:
            raise SourceError(f"Cannot read sources: {exc}") from exc

        logger.info(
            "specification_aggregated",
            service=spec.service.name if spec.service else None,
            slos=len(spec.slos),
            problems=len(aggregator.problems),
        )

        print_specification_summary(spec)
        if aggregator.problems:
            print_problems(aggregator.problems)

        if strict and aggregator.problems:
            raise ValidationError(
                f"Strict mode: {len(aggregator.problems)} directive(s) rejected, nothing written",
                details={"files": len({problem.file for problem in aggregator.problems})},
            )

        written = write_specification(
            spec,
            settings.stdout,
            Path(output_dir) if output_dir else Path.cwd(),
            *settings.formats,
        )

    for path in written:
        success(f"Wrote {path}")
    console.print()
    return ExitCode.SUCCESS
