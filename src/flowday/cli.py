"""FlowDay command line interface.

Thin typer front-end over the insight engine and the JSON planner store:
- `analyze`: run the analysis pipeline and show ranked insights
- `suggest`: propose a routine for a weekday or date, optionally scheduling it
- `patterns`: list persisted patterns
- `record`: append a completed or skipped task to the history

Global options (--log-level, --log-format) override the ``logging`` section
of the YAML config passed with --config.
"""

from __future__ import annotations

import asyncio
import json as json_lib
from collections.abc import Coroutine
from pathlib import Path
from typing import Annotated, Any, NoReturn, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from flowday import __version__
from flowday.core.config import FlowdayConfig
from flowday.core.errors import FlowdayError
from flowday.core.logging import configure_logging, get_logger
from flowday.learning.engine import InsightEngine
from flowday.learning.models import (
    HistoryEntry,
    HistoryStatus,
    Insight,
    Pattern,
    PatternType,
    RoutineSuggestion,
    ScheduledInstance,
)
from flowday.learning.suggestions import resolve_weekday
from flowday.store.json_store import JsonPlannerStore
from flowday.utils.time import DAY_NAMES, minutes_to_time, parse_date, parse_time

T = TypeVar("T")

console = Console()
_logger = get_logger("cli")

app = typer.Typer(
    name="flowday",
    help="Weekly planner insight engine",
    add_completion=False,
)

# Set by global option callbacks, applied once a command loads its config
_log_level: str | None = None
_log_format: str | None = None

StoreOption = Annotated[
    Path | None,
    typer.Option("--store", "-s", help="Planner JSON file (overrides config)"),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="YAML configuration file", envvar="FLOWDAY_CONFIG"),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine parsing"),
]

TYPE_STYLES = {
    "optimization": "yellow",
    "achievement": "green",
    "pattern": "cyan",
    "insight": "magenta",
    "info": "dim",
}


# =============================================================================
# Global option callbacks
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"FlowDay v{__version__}")
        raise typer.Exit()


def log_level_callback(value: str | None) -> str | None:
    """Remember the log level from the CLI option."""
    global _log_level
    if value:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise typer.BadParameter(f"Unknown log level: {value}")
        _log_level = level
    return value


def log_format_callback(value: str | None) -> str | None:
    """Remember the log format from the CLI option."""
    global _log_format
    if value:
        if value not in ("json", "console"):
            raise typer.BadParameter(f"Unknown log format: {value}")
        _log_format = value
    return value


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-L",
            callback=log_level_callback,
            help="Logging level (DEBUG, INFO, WARNING, ERROR)",
            envvar="FLOWDAY_LOG_LEVEL",
        ),
    ] = None,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            callback=log_format_callback,
            help="Log format: json or console",
            envvar="FLOWDAY_LOG_FORMAT",
        ),
    ] = None,
) -> None:
    """FlowDay - learn from your planner history and suggest routines."""


# =============================================================================
# Helpers
# =============================================================================


def reset_cli_state() -> None:
    """Forget log options from a previous invocation (used by tests)."""
    global _log_level, _log_format
    _log_level = None
    _log_format = None


def _load_config(config_path: Path | None) -> FlowdayConfig:
    """Load config and configure logging, CLI options taking precedence."""
    try:
        config = FlowdayConfig.from_yaml(config_path) if config_path else FlowdayConfig()
    except FlowdayError as e:
        _fail(str(e))
    log = config.logging
    configure_logging(
        level=_log_level or log.level,  # type: ignore[arg-type]
        format=_log_format or log.format,  # type: ignore[arg-type]
        file_path=log.file_path,
        include_timestamps=log.include_timestamps,
    )
    return config


def _open_store(config: FlowdayConfig, store_path: Path | None) -> JsonPlannerStore:
    return JsonPlannerStore(store_path.expanduser() if store_path else config.store.path)


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, turning FlowDay errors into a red message and exit 1."""
    try:
        return asyncio.run(coro)
    except FlowdayError as e:
        _logger.error("command_failed", error=str(e), error_type=type(e).__name__)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


def _echo_json(data: Any) -> None:
    # Plain echo: rich would wrap long lines
    typer.echo(json_lib.dumps(data, indent=2, default=str))


def _insight_table(insights: list[Insight]) -> Table:
    table = Table(title="Insights", show_lines=False)
    table.add_column("Priority", justify="right", style="bold")
    table.add_column("Type")
    table.add_column("Title", style="bold")
    table.add_column("Insight")
    for insight in insights:
        style = TYPE_STYLES.get(insight.type.value, "white")
        table.add_row(
            f"{insight.priority:.1f}",
            f"[{style}]{insight.type.value}[/{style}]",
            insight.title,
            insight.text,
        )
    return table


def _pattern_summary(pattern: Pattern) -> str:
    data = pattern.to_dict()
    if pattern.pattern_type == PatternType.SEQUENCE:
        gap = data.get("average_gap")
        return (
            f"{data['from_task_name']} -> {data['to_task_name']} "
            f"x{data['count']}" + (f", gap {gap} min" if gap is not None else "")
        )
    if pattern.pattern_type == PatternType.TIME_DAY:
        return f"{data['task_name']} on {DAY_NAMES[data['day_of_week']]} at {data['average_time']}"
    if pattern.pattern_type == PatternType.TIME:
        return f"{data['task_name']} at {data['average_time']}"
    if pattern.pattern_type == PatternType.DURATION:
        return (
            f"{data['task_name']}: {data['average_actual']} min actual vs "
            f"{data['average_planned']} planned"
        )
    days = ", ".join(DAY_NAMES[d["day"]] for d in data["preferred_days"])
    return f"{data['task_name']}: {data['times_per_week']}x/week ({days})"


# =============================================================================
# Commands
# =============================================================================


@app.command()
def analyze(
    store: StoreOption = None,
    config: ConfigOption = None,
    json_output: JsonOption = False,
) -> None:
    """Analyze history, persist patterns and show ranked insights.

    Examples:
        flowday analyze
        flowday analyze --store planner.json --json
    """
    cfg = _load_config(config)
    engine = InsightEngine(_open_store(cfg, store), cfg.insights)
    result = _run(engine.analyze(trigger="cli"))

    if json_output:
        _echo_json(result.to_dict())
        return

    if result.insights:
        console.print(_insight_table(result.insights))
    else:
        console.print("[dim]No insights yet.[/dim]")
    console.print(f"\n[bold]{len(result.patterns)}[/bold] patterns")


@app.command()
def suggest(
    day: str = typer.Argument(..., help="Weekday number (0=Sunday..6) or YYYY-MM-DD date"),
    store: StoreOption = None,
    config: ConfigOption = None,
    apply: bool = typer.Option(
        False,
        "--apply",
        help="Schedule suggestions on the given date (skips ones already scheduled)",
    ),
    json_output: JsonOption = False,
) -> None:
    """Propose a routine for a weekday or date.

    Examples:
        flowday suggest 1
        flowday suggest 2026-10-20 --apply
    """
    target: int | str = int(day) if day.isdigit() else day
    try:
        weekday = resolve_weekday(target)
    except ValueError as e:
        _fail(str(e))
    if apply and isinstance(target, int):
        _fail("--apply needs a YYYY-MM-DD date, not a weekday number")

    cfg = _load_config(config)
    planner = _open_store(cfg, store)
    engine = InsightEngine(planner, cfg.insights)
    suggestions = _run(engine.generate_routine_suggestion(target))

    if json_output:
        _echo_json([s.to_dict() for s in suggestions])
    elif not suggestions:
        console.print(f"[dim]No routine suggestions for {DAY_NAMES[weekday]}.[/dim]")
    else:
        table = Table(title=f"Routine for {DAY_NAMES[weekday]}")
        table.add_column("Time", style="bold")
        table.add_column("Task", style="cyan")
        table.add_column("Duration", justify="right")
        table.add_column("Confidence", justify="right")
        table.add_column("Reason", style="dim")
        for s in suggestions:
            table.add_row(
                s.suggested_time,
                s.task_name,
                f"{s.duration} min",
                f"{s.confidence:.0%}",
                s.reason,
            )
        console.print(table)

    if apply:
        added = _run(_apply_suggestions(planner, str(target), suggestions))
        if not json_output:
            console.print(f"[green]Scheduled {added} of {len(suggestions)} suggestions[/green]")


async def _apply_suggestions(
    planner: JsonPlannerStore,
    day: str,
    suggestions: list[RoutineSuggestion],
) -> int:
    """Schedule suggestions not already on the grid for that date/task/time."""
    existing = {
        (item.task_id, item.start_time)
        for item in await planner.get_all_scheduled_instances()
        if item.date == day
    }
    added = 0
    for s in suggestions:
        if (s.task_id, s.suggested_time) in existing:
            continue
        await planner.add_scheduled_instance(
            ScheduledInstance(
                id="",
                task_id=s.task_id,
                date=day,
                start_time=s.suggested_time,
                duration=s.duration,
            )
        )
        existing.add((s.task_id, s.suggested_time))
        added += 1
    _logger.info("suggestions_applied", date=day, added=added)
    return added


@app.command()
def patterns(
    store: StoreOption = None,
    config: ConfigOption = None,
    pattern_type: Annotated[
        PatternType | None,
        typer.Option("--type", "-t", help="Only show patterns of this type"),
    ] = None,
    json_output: JsonOption = False,
) -> None:
    """List persisted patterns.

    Examples:
        flowday patterns
        flowday patterns --type sequence --json
    """
    cfg = _load_config(config)
    stored = _run(_open_store(cfg, store).get_all_patterns())
    if pattern_type is not None:
        stored = [p for p in stored if p.pattern_type == pattern_type]
    stored.sort(key=lambda p: p.id)

    if json_output:
        _echo_json([p.to_dict() for p in stored])
        return

    if not stored:
        console.print("[dim]No patterns found. Run 'flowday analyze' first.[/dim]")
        return

    table = Table(title="Patterns")
    table.add_column("ID", style="cyan")
    table.add_column("Type")
    table.add_column("Pattern")
    table.add_column("Samples", justify="right")
    table.add_column("Confidence", justify="right")
    for p in stored:
        label = p.pattern_type.value
        if p.period_category_name:
            label += f" [dim]({p.period_category_name})[/dim]"
        table.add_row(p.id, label, _pattern_summary(p), str(p.sample_size), f"{p.confidence:.0%}")
    console.print(table)


@app.command()
def record(
    task_id: str = typer.Argument(..., help="Task id"),
    date: str = typer.Argument(..., help="Date (YYYY-MM-DD)"),
    start: str = typer.Argument(..., help="Start time (HH:MM)"),
    status: Annotated[
        HistoryStatus,
        typer.Option("--status", help="Outcome of the task"),
    ] = HistoryStatus.COMPLETED,
    planned: int | None = typer.Option(None, "--planned", help="Planned duration in minutes"),
    actual: int | None = typer.Option(None, "--actual", help="Actual duration in minutes"),
    end: str | None = typer.Option(None, "--end", help="End time (HH:MM)"),
    store: StoreOption = None,
    config: ConfigOption = None,
) -> None:
    """Append a completed or skipped task to the history.

    Examples:
        flowday record gym 2026-10-19 07:30 --planned 60 --actual 75 --end 08:45
        flowday record gym 2026-10-20 07:30 --status skipped
    """
    if parse_date(date) is None:
        _fail(f"Not a YYYY-MM-DD date: {date!r}")
    try:
        # Stored zero-padded
        start = minutes_to_time(parse_time(start))
        if end is not None:
            end = minutes_to_time(parse_time(end))
    except ValueError as e:
        _fail(str(e))

    cfg = _load_config(config)
    planner = _open_store(cfg, store)
    entry = _run(
        planner.add_history_entry(
            HistoryEntry(
                id="",
                task_id=task_id,
                date=date,
                status=status,
                start_time=start,
                end_time=end,
                planned_duration=planned,
                actual_duration=actual,
            )
        )
    )
    console.print(f"[green]Recorded[/green] {task_id} {status.value} on {date} at {start}")
    _logger.debug("history_recorded", entry_id=entry.id)


if __name__ == "__main__":
    app()
