"""Twilio channel commands."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import typer

from hb_cli.commands.common import fail, get_state, print_json_payload
from hb_cli.core.config import resolve_twilio_store
from hb_cli.core.constants import TWILIO_CHANNELS, TWILIO_WEBHOOK_URL
from hb_cli.core.state import CLIState
from hb_cli.core.twilio import TwilioError, TwilioStore, channel_instructions

app = typer.Typer(help="Connect the SMS and WhatsApp channels through Twilio")


def _store(state: CLIState) -> TwilioStore:
    return TwilioStore(resolve_twilio_store(state.config))


def _webhook_url(state: CLIState) -> str:
    return str(state.config.get("twilio", {}).get("webhook_url") or TWILIO_WEBHOOK_URL)


@app.command("setup")
def setup_command(
    ctx: typer.Context,
    account_sid: str = typer.Option("", "--account-sid", help="Twilio Account SID", envvar="TWILIO_ACCOUNT_SID"),
    auth_token: str = typer.Option("", "--auth-token", help="Twilio Auth Token", envvar="TWILIO_AUTH_TOKEN"),
    phone_number: str = typer.Option(
        "", "--phone-number", help="Twilio number with SMS and/or WhatsApp", envvar="TWILIO_PHONE_NUMBER"
    ),
) -> None:
    """Save the Twilio account used for SMS and WhatsApp."""
    state = get_state(ctx)
    try:
        account = _store(state).save(account_sid, auth_token, phone_number)
    except TwilioError as exc:
        fail(state, str(exc))

    if state.json_output:
        print_json_payload(state, {"status": "success", "account": account.to_dict(reveal_token=False)})
        return

    if state.plain_output:
        typer.echo("status\tsuccess")
        typer.echo(f"phone_number\t{account.phone_number}")
        return

    state.console.print("Twilio integration saved")
    state.console.print(f"Number: {account.phone_number}")
    state.console.print(
        "[yellow]Credentials are stored in plain text on this machine. "
        "Use a secure backend service in production.[/yellow]"
    )


@app.command("show")
def show_command(
    ctx: typer.Context,
    channel: Optional[str] = typer.Option(None, "--channel", help="Instructions for: whatsapp|sms"),
    show_token: bool = typer.Option(False, "--show-token", help="Print the auth token unmasked"),
) -> None:
    """Show the Twilio account, webhook URL and user instructions."""
    state = get_state(ctx)
    if channel is not None and channel not in TWILIO_CHANNELS:
        raise typer.BadParameter(f"Invalid channel '{channel}'. Expected one of: {', '.join(TWILIO_CHANNELS)}")

    try:
        account = _store(state).load()
        channels = [channel] if channel else list(TWILIO_CHANNELS)
        instructions: Dict[str, List[str]] = (
            {name: channel_instructions(account, name) for name in channels} if account.is_setup else {}
        )
    except TwilioError as exc:
        fail(state, str(exc))

    payload: Dict[str, Any] = {
        "account": account.to_dict(reveal_token=show_token),
        "webhookUrl": _webhook_url(state),
        "autoReply": bool(state.config.get("twilio", {}).get("auto_reply", True)),
        "instructions": instructions,
    }

    if state.json_output:
        print_json_payload(state, payload)
    elif state.plain_output:
        for key, value in payload["account"].items():
            typer.echo(f"{key}\t{str(value).lower() if isinstance(value, bool) else value}")
        typer.echo(f"webhookUrl\t{payload['webhookUrl']}")
        for name, steps in instructions.items():
            for index, step in enumerate(steps, 1):
                typer.echo(f"{name}\t{index}\t{step}")
    else:
        if not account.is_setup:
            state.console.print("Twilio is not set up. Run `hb twilio setup` first.")
        else:
            state.console.print(f"[bold]Twilio number:[/bold] {account.phone_number}")
            state.console.print(f"[bold]Account SID:[/bold] {account.account_sid}")
            state.console.print(f"[bold]Webhook URL:[/bold] {payload['webhookUrl']}")
            for name, steps in instructions.items():
                state.console.print(f"\n[bold]{'WhatsApp' if name == 'whatsapp' else 'SMS'}[/bold]")
                for index, step in enumerate(steps, 1):
                    state.console.print(f"  {index}. {step}")

    if not account.is_setup:
        raise typer.Exit(code=1)
