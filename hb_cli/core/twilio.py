"""Twilio account settings for the SMS and WhatsApp channels."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from hb_cli.core.constants import EXAMPLE_MESSAGES, TWILIO_CHANNELS


class TwilioError(RuntimeError):
    """Raised for incomplete or unreadable Twilio settings."""


def mask_secret(value: str) -> str:
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


@dataclass(frozen=True)
class TwilioAccount:
    account_sid: str = ""
    auth_token: str = ""
    phone_number: str = ""
    is_setup: bool = False

    def to_dict(self, reveal_token: bool = True) -> Dict[str, Any]:
        return {
            "accountSid": self.account_sid,
            "authToken": self.auth_token if reveal_token else mask_secret(self.auth_token),
            "phoneNumber": self.phone_number,
            "isSetup": self.is_setup,
        }


class TwilioStore:
    """Twilio account kept as one JSON document."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> TwilioAccount:
        if not self.path.exists():
            return TwilioAccount()
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as exc:
            raise TwilioError(f"Invalid Twilio settings file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise TwilioError(f"Twilio settings file {self.path} must contain an object")
        return TwilioAccount(
            account_sid=str(data.get("accountSid") or ""),
            auth_token=str(data.get("authToken") or ""),
            phone_number=str(data.get("phoneNumber") or ""),
            is_setup=bool(data.get("isSetup", False)),
        )

    def save(self, account_sid: str, auth_token: str, phone_number: str) -> TwilioAccount:
        """Store the credentials; all three fields are required."""
        fields = {
            "account SID": account_sid.strip(),
            "auth token": auth_token.strip(),
            "phone number": phone_number.strip(),
        }
        missing = [label for label, value in fields.items() if not value]
        if missing:
            raise TwilioError(f"Missing information: {', '.join(missing)}")

        account = TwilioAccount(
            account_sid=fields["account SID"],
            auth_token=fields["auth token"],
            phone_number=fields["phone number"],
            is_setup=True,
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(account.to_dict(), indent=2) + "\n")
        return account


def channel_instructions(account: TwilioAccount, channel: str) -> List[str]:
    """Steps a user follows to start messaging over a channel."""
    if channel not in TWILIO_CHANNELS:
        raise TwilioError(f"Unknown channel {channel!r}; expected one of: {', '.join(TWILIO_CHANNELS)}")
    if not account.is_setup:
        raise TwilioError("Twilio account is not set up. Run `hb twilio setup` first.")

    examples = ", ".join(EXAMPLE_MESSAGES)
    if channel == "whatsapp":
        return [
            f'Save the number {account.phone_number} to your contacts as "HealthBuddie"',
            'Open WhatsApp and message "join" to HealthBuddie',
            f"Start tracking your health by sending messages like: {examples}",
        ]
    return [
        f"Text {account.phone_number} with your health updates",
        f"Start tracking your health by sending messages like: {examples}",
    ]
