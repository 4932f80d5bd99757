"""Session commands."""

from __future__ import annotations

from contextlib import nullcontext

import typer

from hb_cli.commands.common import fail, get_state, print_json_payload
from hb_cli.core.auth import AuthError, HealthBuddieAuth


def login_command(
    ctx: typer.Context,
    phone: str = typer.Option(..., "--phone", help="Phone number", envvar="HB_PHONE_NUMBER"),
) -> None:
    """Create a session for a phone number."""
    state = get_state(ctx)
    auth = HealthBuddieAuth(config=state.config)

    try:
        status_ctx = state.console.status("Signing in...") if not state.plain_output else nullcontext()
        with status_ctx:
            session = auth.login(phone)
    except AuthError as exc:
        fail(state, f"Login failed: {exc}")

    payload = {
        "status": "success",
        "authenticated": True,
        "user": session.user.to_dict(),
    }

    if state.json_output:
        print_json_payload(state, payload)
        return

    if state.plain_output:
        typer.echo("status\tsuccess")
        typer.echo(f"user_id\t{session.user.id}")
        typer.echo(f"phone_number\t{session.user.phone_number}")
        return

    state.console.print("Login successful")
    state.console.print(f"Phone: {session.user.phone_number} ({session.user.id})")


def logout_command(ctx: typer.Context) -> None:
    """Delete the stored session."""
    state = get_state(ctx)
    removed = HealthBuddieAuth(config=state.config).logout()
    message = "Session removed" if removed else "No stored session"

    if state.json_output:
        print_json_payload(state, {"status": "success", "logged_out": removed, "message": message})
        return

    if state.plain_output:
        typer.echo("status\tsuccess")
        typer.echo(f"logged_out\t{str(removed).lower()}")
        typer.echo(f"message\t{message}")
        return

    state.console.print(message)


def session_command(ctx: typer.Context) -> None:
    """Show the stored session."""
    state = get_state(ctx)
    session = HealthBuddieAuth(config=state.config).current()

    if session is None:
        if state.json_output:
            print_json_payload(state, {"authenticated": False})
        elif state.plain_output:
            typer.echo("authenticated\tfalse")
        else:
            state.console.print("Not logged in")
        raise typer.Exit(code=1)

    if state.json_output:
        print_json_payload(state, {"authenticated": True, "user": session.user.to_dict()})
        return

    if state.plain_output:
        typer.echo("authenticated\ttrue")
        typer.echo(f"user_id\t{session.user.id}")
        typer.echo(f"phone_number\t{session.user.phone_number}")
        typer.echo(f"last_active\t{session.user.last_active.isoformat()}")
        return

    state.console.print(f"Logged in as {session.user.phone_number} ({session.user.id})")
