"""Shared command helpers."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional

import typer

from hb_cli.core.api import HealthBuddieAPI
from hb_cli.core.auth import HealthBuddieAuth, Session
from hb_cli.core.config import resolve_api_base, resolve_log_store
from hb_cli.core.conversation import entries_from_messages
from hb_cli.core.log_store import HealthLogStore
from hb_cli.core.models import HealthLogEntry
from hb_cli.core.state import CLIState
from hb_cli.utils.parsing import (
    health_logs_from_response,
    load_message_input,
    message_from_payload,
)

SOURCES = ("local", "remote", "file")


def get_state(ctx: typer.Context) -> CLIState:
    """Extract validated CLI state from Typer context."""
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=2)
    return state


def print_json_payload(state: CLIState, payload: Any) -> None:
    """Print JSON payload with plain-mode fallback for piping."""
    if state.plain_output:
        typer.echo(json.dumps(payload, separators=(",", ":")))
        return
    state.console.print_json(data=payload)


def fail(state: CLIState, message: str, code: int = 1) -> NoReturn:
    """Report an error in the active output mode and exit."""
    if state.json_output:
        print_json_payload(state, {"status": "error", "message": message})
    elif state.plain_output:
        typer.echo("status\terror")
        typer.echo(f"message\t{message}")
    else:
        state.console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code=code)


def current_session(state: CLIState) -> Session:
    """Return the stored session or raise AuthError."""
    return HealthBuddieAuth(config=state.config).require_session()


def build_api(state: CLIState, session: Optional[Session] = None) -> HealthBuddieAPI:
    """API client configured from the [api] section and the session."""
    api_cfg = state.config.get("api", {})
    return HealthBuddieAPI(
        token=session.token if session else "",
        phone_number=session.user.phone_number if session else "",
        base_url=resolve_api_base(state.config),
        rate_limit_delay=float(api_cfg.get("rate_limit_delay", 0.0)),
        max_retries=int(api_cfg.get("max_retries", 3)),
        timeout_seconds=int(api_cfg.get("timeout_seconds", 30)),
    )


def log_store(state: CLIState) -> HealthLogStore:
    return HealthLogStore(resolve_log_store(state.config))


def read_messages_input(file_path: Optional[Path], read_stdin: bool) -> List[Dict[str, Any]]:
    stdin_text = sys.stdin.read() if read_stdin else ""
    return load_message_input(file_path, read_stdin, stdin_text=stdin_text)


def collect_entries(
    state: CLIState,
    source: str,
    days: int = 7,
    file_path: Optional[Path] = None,
    read_stdin: bool = False,
) -> List[HealthLogEntry]:
    """Load health log entries from the local store, the backend or a message file.

    Raises AuthError/APIError for the remote source and OSError/ValueError for
    unreadable input files.
    """
    if source == "local":
        return log_store(state).load()

    if source == "remote":
        session = current_session(state)
        payload = build_api(state, session).get_health_data(days=days)
        return health_logs_from_response(payload)

    if source == "file":
        raw_messages = read_messages_input(file_path, read_stdin)
        messages = [message_from_payload(item) for item in raw_messages]
        return entries_from_messages(messages, rules=state.rules)

    raise typer.BadParameter(f"--source must be one of: {', '.join(SOURCES)}")
