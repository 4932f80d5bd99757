"""Message history, backend health data and connectivity commands."""

from __future__ import annotations

from contextlib import nullcontext
from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from hb_cli.commands.common import (
    build_api,
    current_session,
    fail,
    get_state,
    print_json_payload,
    read_messages_input,
)
from hb_cli.core.api import APIError
from hb_cli.core.auth import AuthError
from hb_cli.core.conversation import with_system_responses
from hb_cli.core.models import HealthLogEntry, Message
from hb_cli.core.state import CLIState
from hb_cli.utils.formatting import format_confidence, format_entry_details, format_timestamp
from hb_cli.utils.parsing import (
    health_logs_from_response,
    message_from_payload,
    messages_from_response,
)


def _fetch_messages(state: CLIState) -> List[Message]:
    session = current_session(state)
    api = build_api(state, session)
    status_ctx = state.console.status("Fetching messages...") if not state.plain_output else nullcontext()
    with status_ctx:
        payload = api.get_messages()
    return messages_from_response(payload)


def messages_command(
    ctx: typer.Context,
    input_file: Optional[Path] = typer.Option(None, "--file", help="JSON/YAML file with messages"),
    read_stdin: bool = typer.Option(False, "--stdin", help="Read messages from stdin"),
    limit: int = typer.Option(50, help="Maximum number of conversation lines to show"),
) -> None:
    """Show the conversation with a generated reply for each incoming message."""
    state = get_state(ctx)

    try:
        if input_file or read_stdin:
            messages = [message_from_payload(item) for item in read_messages_input(input_file, read_stdin)]
        else:
            messages = _fetch_messages(state)
    except (AuthError, APIError, OSError, ValueError) as exc:
        fail(state, str(exc))

    conversation = with_system_responses(
        messages,
        rules=state.rules,
        low_confidence_threshold=state.low_confidence_threshold,
    )[:limit]

    if state.json_output:
        print_json_payload(state, {"messages": [message.to_dict() for message in conversation]})
        return

    if state.plain_output:
        typer.echo("timestamp\tdirection\tcontent")
        for message in conversation:
            typer.echo(f"{message.timestamp.isoformat()}\t{message.direction}\t{message.content}")
        typer.echo(f"total\t{len(conversation)}")
        return

    if not conversation:
        state.console.print("No messages yet")
        return

    table = Table(title=f"Messages ({len(conversation)})")
    table.add_column("Time")
    table.add_column("From")
    table.add_column("Message")
    for message in conversation:
        sender = "You" if message.is_inbound else "Health Buddie"
        table.add_row(format_timestamp(message.timestamp), sender, message.content)
    state.console.print(table)


def _entries_table(title: str, entries: List[HealthLogEntry]) -> Table:
    table = Table(title=title)
    table.add_column("Time")
    table.add_column("Details")
    table.add_column("Confidence")
    table.add_column("Message")
    for entry in entries:
        table.add_row(
            format_timestamp(entry.timestamp),
            format_entry_details(entry),
            format_confidence(entry.confidence),
            entry.raw_message,
        )
    return table


def health_data_command(
    ctx: typer.Context,
    days: int = typer.Option(7, help="Number of days to look back"),
) -> None:
    """Show exercise and food logs recorded by the backend."""
    state = get_state(ctx)

    if days < 1:
        raise typer.BadParameter("--days must be at least 1")

    try:
        session = current_session(state)
        payload = build_api(state, session).get_health_data(days=days)
    except (AuthError, APIError) as exc:
        fail(state, str(exc))

    entries = health_logs_from_response(payload)

    if state.json_output:
        print_json_payload(state, {"days": days, "entries": [entry.to_dict() for entry in entries]})
        return

    if state.plain_output:
        typer.echo("timestamp\tcategory\tdetails\tconfidence")
        for entry in entries:
            typer.echo(
                f"{entry.timestamp.isoformat()}\t{entry.category}\t"
                f"{format_entry_details(entry)}\t{entry.confidence:.2f}"
            )
        typer.echo(f"total\t{len(entries)}")
        return

    exercise = [entry for entry in entries if entry.category == "exercise"]
    food = [entry for entry in entries if entry.category == "food"]
    state.console.print(_entries_table(f"Exercise Logs ({len(exercise)})", exercise))
    state.console.print(_entries_table(f"Food Logs ({len(food)})", food))


def ping_command(ctx: typer.Context) -> None:
    """Check whether the backend is reachable."""
    state = get_state(ctx)
    result = build_api(state).test_connection()

    if state.json_output:
        print_json_payload(state, result)
    elif state.plain_output:
        typer.echo(f"success\t{str(result['success']).lower()}")
        typer.echo(f"message\t{result['message']}")
    else:
        state.console.print(result["message"])

    if not result["success"]:
        raise typer.Exit(code=1)
