"""Weekly summary command."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

import typer
from rich.markdown import Markdown

from hb_cli.commands.common import SOURCES, collect_entries, fail, get_state, print_json_payload
from hb_cli.core.api import APIError
from hb_cli.core.auth import AuthError
from hb_cli.core.summary import build_weekly_summary, summary_to_markdown
from hb_cli.utils.date_ranges import resolve_date_range, validate_date


def lookback_days(start: date, today: Optional[date] = None) -> int:
    """Days of backend history needed to cover a range starting at ``start``."""
    return max(((today or date.today()) - start).days + 1, 1)


def summary_command(
    ctx: typer.Context,
    start_date: Optional[str] = typer.Option(None, help="Start date (YYYY-MM-DD)", callback=validate_date),
    end_date: Optional[str] = typer.Option(None, help="End date (YYYY-MM-DD)", callback=validate_date),
    last_days: Optional[int] = typer.Option(None, help="Summarize last N days"),
    last_weeks: Optional[int] = typer.Option(None, help="Summarize last N weeks"),
    this_week: bool = typer.Option(False, help="Summarize this week"),
    last_week: bool = typer.Option(False, help="Summarize previous week"),
    source: str = typer.Option("local", help="Entry source: local|remote|file"),
    input_file: Optional[Path] = typer.Option(None, "--file", help="Messages file for --source file"),
    read_stdin: bool = typer.Option(False, "--stdin", help="Read messages from stdin for --source file"),
) -> None:
    """Summarize exercise and food logs over a date range."""
    state = get_state(ctx)

    if source not in SOURCES:
        raise typer.BadParameter(f"--source must be one of: {', '.join(SOURCES)}")

    start, end = resolve_date_range(
        start_date=start_date,
        end_date=end_date,
        last_days=last_days,
        last_weeks=last_weeks,
        this_week=this_week,
        last_week=last_week,
    )

    try:
        entries = collect_entries(
            state,
            source,
            days=lookback_days(start),
            file_path=input_file,
            read_stdin=read_stdin,
        )
    except (AuthError, APIError, OSError, ValueError) as exc:
        fail(state, str(exc))

    summary = build_weekly_summary(entries, start, end)

    if state.json_output:
        print_json_payload(state, summary.to_dict())
        return

    if state.plain_output:
        typer.echo(f"start_date\t{summary.start_date.isoformat()}")
        typer.echo(f"end_date\t{summary.end_date.isoformat()}")
        typer.echo(f"exercise_count\t{summary.exercise_count}")
        typer.echo(f"average_exercise_duration\t{summary.average_exercise_duration}")
        typer.echo(f"food_log_count\t{summary.food_log_count}")
        for exercise_type, count in summary.exercise_types.items():
            typer.echo(f"type\t{exercise_type}\t{count}")
        return

    state.console.print(Markdown(summary_to_markdown(summary)))
