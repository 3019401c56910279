"""Rich terminal rendering of a GcAnalyzedData report."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from .models import GcAnalyzedData, GcEvent, GcPauseStat, LogType

GC_ANALYZE_THEME = Theme(
    {
        "critical": "bold red",
        "warning": "bold yellow",
        "success": "bold green",
        "info": "cyan",
        "metric": "white",
        "label": "dim white",
        "header": "bold magenta",
    }
)

LOG_TYPE_TITLES: dict[LogType, str] = {
    "FULL_GC": "Full GC",
    "MINOR_GC": "Minor GC (ParNew)",
    "CMS_INIT_MARK": "CMS Initial Mark",
    "CMS_FINAL_REMARK": "CMS Final Remark",
    "CMS_CONCURRENT": "CMS Concurrent",
}

NOT_AVAILABLE = "n/a"


def create_console() -> Console:
    return Console(theme=GC_ANALYZE_THEME)


def format_seconds(seconds: float | None) -> str:
    """Format seconds for human-readable output."""
    if seconds is None:
        return NOT_AVAILABLE
    if seconds > 60:
        return f"{seconds:.1f}s ({seconds / 60:.1f}m)"
    return f"{seconds:.4f}s"


def format_uptime(timestamp: int) -> str:
    """Render a millisecond uptime back in the log's seconds notation."""
    return f"{timestamp / 1000:.3f}"


def format_event(event: GcEvent | None) -> str:
    if event is None:
        return NOT_AVAILABLE
    return f"{format_seconds(event.pause_time)} @ {format_uptime(event.timestamp)}"


def build_pause_rows(data: GcAnalyzedData) -> list[dict[str, str]]:
    """Build one summary row per pause category."""
    rows: list[dict[str, str]] = []
    for stat in data.pauses:
        rows.append(
            {
                "type": LOG_TYPE_TITLES[stat.type],
                "count": str(stat.count),
                "total": format_seconds(stat.total_pause_time),
                "mean": format_seconds(stat.sample_mean),
                "std_dev": format_seconds(stat.sample_std_dev),
                "median": format_seconds(stat.sample_median),
                "min": format_event(stat.min_event),
                "max": format_event(stat.max_event),
            }
        )
    return rows


def build_mean_estimate_rows(stat: GcPauseStat) -> list[tuple[str, str]]:
    rows: list[tuple[str, str]] = []
    for estimate in stat.means:
        confidence = f"{(1 - estimate.level) * 100:g}%"
        if estimate.mean is None:
            rows.append((confidence, NOT_AVAILABLE))
        else:
            rows.append(
                (
                    confidence,
                    f"{format_seconds(estimate.mean.min)} .. {format_seconds(estimate.mean.max)}",
                )
            )
    return rows


def build_outlier_rows(stat: GcPauseStat) -> list[tuple[str, str, str]]:
    """Rows of (level, outlier count, outlier pauses)."""
    rows: list[tuple[str, str, str]] = []
    for outliers in stat.outliers:
        level = f"{outliers.level:g}"
        if outliers.events is None:
            rows.append((level, NOT_AVAILABLE, ""))
            continue
        pauses = ", ".join(format_event(e) for e in outliers.events)
        rows.append((level, str(len(outliers.events)), pauses))
    return rows


def build_concurrent_rows(data: GcAnalyzedData) -> list[tuple[str, str]]:
    return [(stat.type_detail, str(stat.count)) for stat in data.concurrences]


def build_parsing_coverage_rows(
    total_events: int, dropped_lines: int, pending_threads: list[int]
) -> list[tuple[str, str]]:
    """Build rows describing parsing coverage."""
    rows = [
        ("Parsed events", str(total_events)),
        ("Dropped lines", str(dropped_lines)),
    ]
    if pending_threads:
        rows.append(("Unfinished lines (threads)", ", ".join(str(t) for t in pending_threads)))
    return rows


def create_key_value_table(title: str, rows: list[tuple[str, str]]) -> Table:
    """Create a simple two-column key/value table."""
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="label")
    table.add_column("Value", style="metric")
    for label, value in rows:
        table.add_row(label, value)
    return table


def create_pause_table(data: GcAnalyzedData) -> Table:
    table = Table(title="Pause Time Analysis", show_header=True, header_style="header")

    table.add_column("GC Type", style="info")
    table.add_column("Count", justify="right", style="metric")
    table.add_column("Total", justify="right", style="metric")
    table.add_column("Mean", justify="right", style="metric")
    table.add_column("Std Dev", justify="right", style="metric")
    table.add_column("Median", justify="right", style="metric")
    table.add_column("Min", justify="right", style="metric")
    table.add_column("Max", justify="right", style="metric")

    for row in build_pause_rows(data):
        table.add_row(
            row["type"],
            row["count"],
            row["total"],
            row["mean"],
            row["std_dev"],
            row["median"],
            row["min"],
            row["max"],
        )
    return table


def create_estimate_panel(stat: GcPauseStat) -> Panel:
    table = Table(show_header=True, header_style="header", box=None, padding=(0, 2))
    table.add_column("Confidence", style="label")
    table.add_column("Mean pause range", style="metric")
    for confidence, mean_range in build_mean_estimate_rows(stat):
        table.add_row(confidence, mean_range)

    outlier_table = Table(show_header=True, header_style="header", box=None, padding=(0, 2))
    outlier_table.add_column("Level", style="label")
    outlier_table.add_column("Outliers", justify="right", style="metric")
    outlier_table.add_column("Pauses", style="warning")
    for level, count, pauses in build_outlier_rows(stat):
        outlier_table.add_row(level, count, pauses)

    grid = Table.grid(padding=(1, 0))
    grid.add_row(table)
    grid.add_row(outlier_table)
    return Panel(grid, title=LOG_TYPE_TITLES[stat.type], border_style="info")


def create_concurrent_table(data: GcAnalyzedData) -> Table:
    table = Table(title="CMS Concurrent Phases", show_header=True, header_style="header")
    table.add_column("Phase", style="info")
    table.add_column("Count", justify="right", style="metric")
    for phase, count in build_concurrent_rows(data):
        table.add_row(phase, count)
    return table


def render_report(data: GcAnalyzedData, console: Console) -> None:
    """Print the whole report."""
    console.print(create_pause_table(data))
    console.print()
    for stat in data.pauses:
        if stat.count > 0:
            console.print(create_estimate_panel(stat))
    if data.concurrences:
        console.print()
        console.print(create_concurrent_table(data))
