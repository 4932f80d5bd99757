from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

import pytest
from typer.testing import CliRunner

from hb_cli.core.models import ExerciseData, FoodData, HealthLogEntry, Message


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point config, data and report locations at a temporary directory."""
    monkeypatch.setenv("HB_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("HB_CONFIG_FILE", str(tmp_path / "config.toml"))
    monkeypatch.setenv("HB_OUTPUT_DIR", str(tmp_path / "reports"))
    for name in (
        "HB_SESSION_STORE",
        "HB_LOG_STORE",
        "HB_TEMPLATE_STORE",
        "HB_TWILIO_STORE",
        "HB_API_BASE_URL",
        "TWILIO_ACCOUNT_SID",
        "TWILIO_AUTH_TOKEN",
        "TWILIO_PHONE_NUMBER",
    ):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture()
def noon_utc() -> datetime:
    return datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def incoming_message(noon_utc: datetime):
    def _make(content: str, message_id: str = "m1", direction: str = "incoming") -> Message:
        return Message(id=message_id, content=content, timestamp=noon_utc, direction=direction)

    return _make


@pytest.fixture()
def sample_entries(noon_utc: datetime) -> List[HealthLogEntry]:
    return [
        HealthLogEntry(
            id="e1",
            timestamp=noon_utc,
            raw_message="I ran for 30 minutes today",
            category="exercise",
            processed=ExerciseData(duration=30, type="running"),
            confidence=0.9,
        ),
        HealthLogEntry(
            id="e2",
            timestamp=noon_utc.replace(day=11),
            raw_message="I did yoga",
            category="exercise",
            processed=ExerciseData(type="yoga"),
            confidence=0.8,
        ),
        HealthLogEntry(
            id="e3",
            timestamp=noon_utc.replace(day=12),
            raw_message="Had a salad with grilled chicken for lunch",
            category="food",
            processed=FoodData(description="salad with grilled chicken"),
            confidence=0.8,
        ),
    ]


@pytest.fixture()
def sample_message_records() -> List[Dict[str, Any]]:
    return [
        {
            "id": "m1",
            "content": "I walked 2 miles this morning",
            "timestamp": "2026-02-10T08:00:00Z",
            "type": "incoming",
            "channel": "whatsapp",
        },
        {
            "id": "m2",
            "content": "Had some oatmeal for breakfast",
            "timestamp": "2026-02-10T09:00:00Z",
            "type": "incoming",
            "channel": "sms",
        },
        {
            "id": "m3",
            "content": "Nice work!",
            "timestamp": "2026-02-10T09:30:00Z",
            "type": "outgoing",
            "channel": "sms",
        },
    ]


@pytest.fixture()
def write_temp_json(tmp_path: Path):
    def _write(name: str, payload: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload, indent=2) + "\n")
        return path

    return _write


@pytest.fixture()
def write_temp_toml(tmp_path: Path):
    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content.strip() + "\n")
        return path

    return _write
