from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

import pytest
import typer
from rich.console import Console

from hb_cli.commands.common import (
    build_api,
    collect_entries,
    fail,
    get_state,
    log_store,
    print_json_payload,
)
from hb_cli.core.auth import AuthError, Session, User
from hb_cli.core.state import CLIState


@dataclass
class FakeContext:
    obj: Any


def _state(config: Dict[str, Any] | None = None, json_output: bool = False) -> CLIState:
    return CLIState(
        json_output=json_output,
        plain_output=True,
        verbose=False,
        quiet=False,
        config_path=Path("/tmp/config.toml"),
        config=config or {"api": {"rate_limit_delay": 0.25, "max_retries": 5, "timeout_seconds": 12}},
        console=Console(record=True),
    )


def _session() -> Session:
    now = datetime(2026, 2, 10, tzinfo=timezone.utc)
    return Session(token="tok-1", user=User(id="u1", phone_number="+15551234567", created_at=now, last_active=now))


def test_get_state_returns_cli_state() -> None:
    state = _state()
    assert get_state(FakeContext(obj=state)) is state


def test_get_state_raises_on_invalid_obj() -> None:
    with pytest.raises(typer.Exit):
        get_state(FakeContext(obj={"not": "state"}))


def test_build_api_uses_configured_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HB_API_BASE_URL", "http://example.test/api/")
    api = build_api(_state(), _session())

    assert api.token == "tok-1"
    assert api.phone_number == "+15551234567"
    assert api.base_url == "http://example.test/api"
    assert api.rate_limit_delay == 0.25
    assert api.max_retries == 5
    assert api.timeout_seconds == 12


def test_build_api_without_session() -> None:
    api = build_api(_state())
    assert api.token == ""
    assert api.phone_number == ""


def test_fail_plain_output(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(typer.Exit) as exc_info:
        fail(_state(), "something broke")
    assert exc_info.value.exit_code == 1
    assert capsys.readouterr().out == "status\terror\nmessage\tsomething broke\n"


def test_collect_entries_local(isolated_env: Path, sample_entries) -> None:
    state = _state({})
    store = log_store(state)
    for entry in sample_entries:
        store.append(entry)

    entries = collect_entries(state, "local")
    assert [entry.id for entry in entries] == ["e1", "e2", "e3"]


def test_collect_entries_from_file(isolated_env: Path, write_temp_json, sample_message_records) -> None:
    path = write_temp_json("messages.json", {"messages": sample_message_records})
    entries = collect_entries(_state({}), "file", file_path=path)
    assert [entry.category for entry in entries] == ["exercise", "food"]


def test_collect_entries_remote(monkeypatch: pytest.MonkeyPatch, isolated_env: Path) -> None:
    seen: Dict[str, Any] = {}

    class FakeAPI:
        def get_health_data(self, days: int) -> Dict[str, Any]:
            seen["days"] = days
            return {
                "success": True,
                "data": {
                    "exerciseLogs": [
                        {
                            "id": "r1",
                            "timestamp": "2026-02-10T08:00:00Z",
                            "rawMessage": "I ran for 30 minutes",
                            "category": "exercise",
                            "processed": {"exercise": {"duration": 30, "type": "running"}},
                            "confidence": 0.9,
                        }
                    ],
                    "foodLogs": [],
                },
            }

    monkeypatch.setattr("hb_cli.commands.common.current_session", lambda state: _session())
    monkeypatch.setattr("hb_cli.commands.common.build_api", lambda state, session=None: FakeAPI())

    entries = collect_entries(_state({}), "remote", days=14)
    assert seen["days"] == 14
    assert [entry.id for entry in entries] == ["r1"]


def test_collect_entries_remote_requires_session(isolated_env: Path) -> None:
    with pytest.raises(AuthError):
        collect_entries(_state({}), "remote")


def test_collect_entries_unknown_source() -> None:
    with pytest.raises(typer.BadParameter):
        collect_entries(_state({}), "cloud")


def test_print_json_payload_plain_is_compact(capsys: pytest.CaptureFixture[str]) -> None:
    print_json_payload(_state(), {"a": 1, "b": [1, 2]})
    assert json.loads(capsys.readouterr().out) == {"a": 1, "b": [1, 2]}
