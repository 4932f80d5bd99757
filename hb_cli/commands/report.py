"""Export health logs as PDF, CSV or JSON."""

from __future__ import annotations

from contextlib import nullcontext
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from hb_cli.commands.common import SOURCES, collect_entries, fail, get_state, print_json_payload
from hb_cli.commands.summary import lookback_days
from hb_cli.core.api import APIError
from hb_cli.core.auth import AuthError
from hb_cli.core.config import resolve_output_dir
from hb_cli.core.constants import REPORT_FILENAME
from hb_cli.core.summary import filter_entries
from hb_cli.exporters.csv_export import write_csv
from hb_cli.exporters.json_export import entries_payload, write_json
from hb_cli.exporters.pdf_report import ReportError, ReportOptions, write_pdf_report
from hb_cli.utils.date_ranges import resolve_date_range, validate_date

FORMATS = ("pdf", "csv", "json")


def report_command(
    ctx: typer.Context,
    start_date: Optional[str] = typer.Option(None, help="Start date (YYYY-MM-DD)", callback=validate_date),
    end_date: Optional[str] = typer.Option(None, help="End date (YYYY-MM-DD)", callback=validate_date),
    last_days: Optional[int] = typer.Option(None, help="Report last N days"),
    last_weeks: Optional[int] = typer.Option(None, help="Report last N weeks"),
    this_week: bool = typer.Option(False, help="Report this week"),
    last_week: bool = typer.Option(False, help="Report previous week"),
    output_format: str = typer.Option("pdf", "--format", help="Export format: pdf|csv|json"),
    output_dir: Optional[Path] = typer.Option(None, help="Output directory"),
    output_file: Optional[Path] = typer.Option(None, help="Output file (overrides --output-dir)"),
    source: str = typer.Option("local", help="Entry source: local|remote|file"),
    input_file: Optional[Path] = typer.Option(None, "--file", help="Messages file for --source file"),
    read_stdin: bool = typer.Option(False, "--stdin", help="Read messages from stdin for --source file"),
    no_raw: bool = typer.Option(False, "--no-raw", help="Leave raw messages out of the PDF"),
) -> None:
    """Export health log entries for a date range."""
    state = get_state(ctx)

    if output_format not in FORMATS:
        raise typer.BadParameter(f"--format must be one of: {', '.join(FORMATS)}")
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

    report_cfg = state.config.get("report", {})
    if output_file is None:
        out_dir = resolve_output_dir(state.config, explicit=output_dir)
        if output_format == "pdf":
            output_file = out_dir / str(report_cfg.get("filename") or REPORT_FILENAME)
        else:
            output_file = out_dir / f"health-logs.{output_format}"

    try:
        entries = filter_entries(
            collect_entries(
                state,
                source,
                days=lookback_days(start),
                file_path=input_file,
                read_stdin=read_stdin,
            ),
            start,
            end,
        )

        if output_format == "pdf":
            options = ReportOptions(
                start_date=start,
                end_date=end,
                include_raw_messages=bool(report_cfg.get("include_raw_messages", True)) and not no_raw,
            )
            status_ctx = state.console.status("Generating PDF...") if not state.plain_output else nullcontext()
            with status_ctx:
                path = write_pdf_report(output_file, entries, options)
        elif output_format == "csv":
            path = write_csv(output_file, entries)
        else:
            path = write_json(output_file, entries_payload(entries, start, end))
    except (AuthError, APIError, ReportError, OSError, ValueError) as exc:
        fail(state, str(exc))

    result: Dict[str, Any] = {
        "status": "exported",
        "format": output_format,
        "path": str(path),
        "count": len(entries),
        "dateRange": {"start": start.isoformat(), "end": end.isoformat()},
    }

    if state.json_output:
        print_json_payload(state, result)
        return

    if state.plain_output:
        for key in ("status", "format", "path", "count"):
            typer.echo(f"{key}\t{result[key]}")
        return

    state.console.print(f"Exported {len(entries)} entries as {output_format} to {path}")
