#!/usr/bin/env python3
"""cms-gc-analyze: pause-time statistics for CMS GC logs.

Parses logs written with
``-XX:+UseConcMarkSweepGC -XX:+PrintGCDetails -XX:+PrintGCTimeStamps -XX:+LogVMOutput``,
rejoins lines split between JVM writer threads, and reports per-category
pause statistics:

- sample mean, standard deviation, median, min and max pause
- Student-t confidence intervals for the mean pause
- Grubbs' test for abnormally long pauses
- CMS concurrent phase counts
- Optional JSON export of the full report
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.logging import RichHandler

from . import __version__
from .analyzer import LogAnalyzer
from .errors import GcAnalyzeError
from .models import AnalysisSettings, GcEvent
from .parser import CmsLogParser
from .render import (
    build_parsing_coverage_rows,
    create_console,
    create_key_value_table,
    render_report,
)

console = create_console()

app = typer.Typer(
    name="cms-gc-analyze",
    help="Pause-time statistics for CMS (Concurrent Mark Sweep) GC logs",
    add_completion=False,
    rich_markup_mode="rich",
)


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich; DEBUG shows every dropped line."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


@app.command()
def analyze(
    log_file: Annotated[
        Path,
        typer.Argument(
            help="Path to CMS GC log file to analyze",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    mean_level: Annotated[
        list[float] | None,
        typer.Option(
            "--mean-level",
            "-m",
            help="Significance level for mean estimation, repeatable (default: 0.01 0.05 0.1)",
        ),
    ] = None,
    outlier_level: Annotated[
        list[float] | None,
        typer.Option(
            "--outlier-level",
            "-l",
            help="Significance level for outlier detection, repeatable (default: 0.01 0.1 0.25)",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Export the analysis report as JSON (e.g., report.json)",
            file_okay=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output, including every line the parser dropped",
        ),
    ] = False,
) -> None:
    """Analyze a CMS GC log file.

    Exit codes: 0 = report produced, 1 = unreadable log, no events or bad log content,
    2 = invalid levels.
    """
    configure_logging(verbose)

    overrides: dict[str, list[float]] = {}
    if mean_level:
        overrides["mean_levels"] = mean_level
    if outlier_level:
        overrides["outlier_levels"] = outlier_level
    try:
        settings = AnalysisSettings(**overrides)
    except ValidationError as e:
        console.print(f"[critical]ERROR: invalid level: {e.errors()[0]['msg']}[/critical]")
        sys.exit(2)

    parser = CmsLogParser()
    try:
        events: list[GcEvent] = parser.parse_file(log_file)
        if parser.read_error is not None:
            console.print(f"[critical]ERROR: {parser.read_error}[/critical]")
            sys.exit(1)

        if verbose:
            console.print(f"[info]Parsed {len(events)} GC events from {log_file}[/info]")

        if not events:
            console.print("[critical]ERROR: No usable GC events found in log file[/critical]")
            sys.exit(1)

        data = LogAnalyzer(events, settings).analyze_data()
    except GcAnalyzeError as e:
        console.print(f"[critical]ERROR: {e}[/critical]")
        if verbose:
            console.print_exception()
        sys.exit(1)

    console.print(
        create_key_value_table(
            "Parsing Coverage",
            build_parsing_coverage_rows(len(events), parser.dropped_lines, parser.pending_threads),
        )
    )
    console.print()
    render_report(data, console)

    if output:
        output.write_text(data.model_dump_json(indent=2), encoding="utf-8")
        console.print(f"\n[success]Report exported to {output}[/success]")


@app.command()
def version() -> None:
    """Display version."""
    console.print(f"cms-gc-analyze {__version__}")


if __name__ == "__main__":
    app()
