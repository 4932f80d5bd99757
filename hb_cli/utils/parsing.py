"""Parsing helpers for message payloads."""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from hb_cli.core.constants import CHANNELS, DIRECTIONS
from hb_cli.core.models import HealthLogEntry, Message
from hb_cli.utils.date_ranges import parse_timestamp, utc_now

logger = logging.getLogger(__name__)


def message_from_payload(payload: Dict[str, Any]) -> Message:
    """Build a Message from a backend or file record.

    The direction is read from ``type`` (backend shape) or ``direction``;
    unknown values fall back to ``incoming``.
    """
    direction = str(payload.get("type") or payload.get("direction") or "incoming").lower()
    if direction not in DIRECTIONS:
        direction = "incoming"

    channel = str(payload.get("channel") or "whatsapp").lower()
    if channel not in CHANNELS:
        channel = "whatsapp"

    raw_timestamp = payload.get("timestamp")
    timestamp = parse_timestamp(raw_timestamp) if raw_timestamp not in (None, "") else utc_now()

    return Message(
        id=str(payload.get("id") or f"msg-{uuid.uuid4().hex[:12]}"),
        content=str(payload.get("content") or ""),
        timestamp=timestamp,
        direction=direction,
        channel=channel,
        phone_number=payload.get("phoneNumber") or None,
    )


def messages_from_response(payload: Any) -> List[Message]:
    """Extract messages from a ``{success, messages: [...]}`` response."""
    if isinstance(payload, dict):
        payload = payload.get("messages", [])
    if not isinstance(payload, list):
        return []
    return [message_from_payload(item) for item in payload if isinstance(item, dict)]


def load_message_input(file_path: Optional[Path], read_stdin: bool, stdin_text: str = "") -> List[Dict[str, Any]]:
    """Load message object(s) from a JSON/YAML file or stdin text."""
    raw_data: Any
    if file_path:
        text = file_path.read_text()
        if file_path.suffix.lower() in {".yaml", ".yml"}:
            raw_data = yaml.safe_load(text)
        else:
            raw_data = json.loads(text)
    elif read_stdin:
        text = stdin_text.strip()
        if not text:
            return []
        try:
            raw_data = json.loads(text)
        except json.JSONDecodeError:
            raw_data = yaml.safe_load(text)
    else:
        return []

    if isinstance(raw_data, dict) and isinstance(raw_data.get("messages"), list):
        raw_data = raw_data["messages"]
    if isinstance(raw_data, dict):
        return [raw_data]
    if isinstance(raw_data, list):
        return [item for item in raw_data if isinstance(item, dict)]
    return []


def health_logs_from_response(payload: Any) -> List[HealthLogEntry]:
    """Extract entries from a ``{success, data: {exerciseLogs, foodLogs}}`` response."""
    data = payload.get("data", payload) if isinstance(payload, dict) else {}
    if not isinstance(data, dict):
        return []

    entries: List[HealthLogEntry] = []
    for key in ("exerciseLogs", "foodLogs"):
        for item in data.get(key) or []:
            if not isinstance(item, dict):
                continue
            try:
                entries.append(HealthLogEntry.from_dict(item))
            except (ValueError, KeyError, TypeError) as exc:
                logger.warning("Skipping malformed %s record: %s", key, exc)

    entries.sort(key=lambda entry: entry.timestamp)
    return entries
