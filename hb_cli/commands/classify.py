"""Classify and log health messages."""

from __future__ import annotations

import uuid
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.table import Table

from hb_cli.commands.common import fail, get_state, log_store, print_json_payload
from hb_cli.core.config import resolve_output_dir
from hb_cli.core.constants import REPORT_FILENAME
from hb_cli.core.conversation import ProcessedMessage, process_message
from hb_cli.core.models import Message
from hb_cli.core.state import CLIState
from hb_cli.exporters.pdf_report import ReportError, ReportOptions, write_pdf_report
from hb_cli.utils.date_ranges import utc_now
from hb_cli.utils.formatting import format_confidence, format_entry_details


def _incoming(text: str) -> Message:
    return Message(id=f"msg-{uuid.uuid4().hex[:12]}", content=text, timestamp=utc_now())


def _payload(processed: ProcessedMessage) -> Dict[str, Any]:
    return {
        "message": processed.message.to_dict(),
        "classification": processed.result.to_dict(),
        "entry": processed.entry.to_dict() if processed.entry else None,
        "reply": processed.reply,
    }


def _print_result(state: CLIState, processed: ProcessedMessage, extra: Dict[str, Any]) -> None:
    payload = _payload(processed)
    payload.update(extra)

    if state.json_output:
        print_json_payload(state, payload)
        return

    result = processed.result
    if state.plain_output:
        typer.echo(f"category\t{result.category or '-'}")
        typer.echo(f"confidence\t{result.confidence:.2f}")
        if processed.entry:
            typer.echo(f"details\t{format_entry_details(processed.entry)}")
        typer.echo(f"reply\t{processed.reply}")
        for key, value in extra.items():
            typer.echo(f"{key}\t{value}")
        return

    table = Table(title="Classification")
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Category", result.category or "-")
    table.add_row("Confidence", format_confidence(result.confidence))
    if processed.entry:
        table.add_row("Details", format_entry_details(processed.entry))
    state.console.print(table)
    state.console.print(f"Reply: {processed.reply}")
    if extra.get("report"):
        state.console.print(f"Weekly report written to: {extra['report']}")


def classify_command(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Message text"),
) -> None:
    """Classify a message and show the reply without storing anything."""
    state = get_state(ctx)
    processed = process_message(
        _incoming(text),
        rules=state.rules,
        low_confidence_threshold=state.low_confidence_threshold,
    )
    _print_result(state, processed, {})


def log_command(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Message text"),
    output_dir: Optional[Path] = typer.Option(None, help="Directory for the weekly report"),
) -> None:
    """Classify a message, store the health log entry and show the reply.

    A status request writes the weekly PDF report instead of a log entry.
    """
    state = get_state(ctx)
    message = _incoming(text)
    processed = process_message(
        message,
        rules=state.rules,
        low_confidence_threshold=state.low_confidence_threshold,
    )

    store = log_store(state)
    extra: Dict[str, Any] = {"stored": False}

    try:
        if processed.is_status_request:
            end = message.timestamp.astimezone().date()
            start = end - timedelta(days=6)
            report_cfg = state.config.get("report", {})
            out_dir = resolve_output_dir(state.config, explicit=output_dir)
            path = write_pdf_report(
                out_dir / str(report_cfg.get("filename") or REPORT_FILENAME),
                store.load(),
                ReportOptions(
                    start_date=start,
                    end_date=end,
                    include_raw_messages=bool(report_cfg.get("include_raw_messages", True)),
                ),
            )
            extra["report"] = str(path)
        elif processed.entry is not None:
            store.append(processed.entry)
            extra["stored"] = True
    except (OSError, ReportError) as exc:
        fail(state, str(exc))

    _print_result(state, processed, extra)
