from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import pytest

from hb_cli.core.api import APIError
from hb_cli.core.auth import (
    AuthError,
    HealthBuddieAuth,
    SessionStore,
    normalize_phone_number,
)


def _auth(tmp_path: Path, remote_login: bool = False) -> HealthBuddieAuth:
    config: Dict[str, Any] = {"auth": {"remote_login": remote_login}, "api": {"max_retries": 1}}
    return HealthBuddieAuth(config=config, store=SessionStore(tmp_path / "session.json"))


@pytest.mark.parametrize(
    "raw,expected",
    [("+1 (555) 123-4567", "+15551234567"), ("555.123.4567", "5551234567")],
)
def test_normalize_phone_number(raw: str, expected: str) -> None:
    assert normalize_phone_number(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "12", "+1-555-CALL-NOW"])
def test_normalize_phone_number_rejects_invalid(raw: str) -> None:
    with pytest.raises(AuthError):
        normalize_phone_number(raw)


def test_local_login_saves_session(tmp_path: Path) -> None:
    auth = _auth(tmp_path)
    session = auth.login("+1 555 123 4567")

    assert session.token.startswith("demo-token-")
    assert session.user.phone_number == "+15551234567"
    stored = json.loads((tmp_path / "session.json").read_text())
    assert stored["schemaVersion"] == 1
    assert stored["user"]["phoneNumber"] == "+15551234567"
    assert auth.current() == session


def test_logout_clears_session(tmp_path: Path) -> None:
    auth = _auth(tmp_path)
    auth.login("5551234567")
    assert auth.logout() is True
    assert auth.current() is None
    assert auth.logout() is False


def test_require_session_without_login(tmp_path: Path) -> None:
    with pytest.raises(AuthError, match="Not logged in"):
        _auth(tmp_path).require_session()


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        json.dumps(["list"]),
        json.dumps({"schemaVersion": 0, "token": "t", "user": {"phoneNumber": "555"}}),
        json.dumps({"schemaVersion": 1, "token": "t", "user": {}}),
        json.dumps({"schemaVersion": 1, "token": "", "user": {"phoneNumber": "555"}}),
    ],
)
def test_invalid_session_file_is_cleared(tmp_path: Path, caplog: pytest.LogCaptureFixture, content: str) -> None:
    caplog.set_level(logging.WARNING, logger="hb_cli.core.auth")
    path = tmp_path / "session.json"
    path.write_text(content)

    assert SessionStore(path).load() is None
    assert not path.exists()
    assert "Discarding session file" in caplog.text


def test_remote_login_uses_backend_token(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    seen: Dict[str, Any] = {}

    def fake_login(self, phone_number: str) -> Dict[str, Any]:  # type: ignore[no-untyped-def]
        seen["phone"] = phone_number
        seen["base_url"] = self.base_url
        return {
            "success": True,
            "token": "server-token",
            "user": {"id": "u-7", "phoneNumber": phone_number, "createdAt": "2026-02-01T10:00:00Z"},
        }

    monkeypatch.delenv("HB_API_BASE_URL", raising=False)
    monkeypatch.setattr("hb_cli.core.auth.HealthBuddieAPI.login", fake_login)

    session = _auth(tmp_path, remote_login=True).login("5551234567")

    assert seen["phone"] == "5551234567"
    assert session.token == "server-token"
    assert session.user.id == "u-7"
    assert session.user.created_at.isoformat() == "2026-02-01T10:00:00+00:00"


def test_remote_login_errors_become_auth_errors(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_login(self, phone_number: str) -> Dict[str, Any]:  # type: ignore[no-untyped-def]
        raise APIError("API request failed for POST /login: boom")

    monkeypatch.setattr("hb_cli.core.auth.HealthBuddieAPI.login", fake_login)

    auth = _auth(tmp_path, remote_login=True)
    with pytest.raises(AuthError, match="Login failed"):
        auth.login("5551234567")
    assert auth.current() is None


def test_remote_login_without_token(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr("hb_cli.core.auth.HealthBuddieAPI.login", lambda self, phone: {"success": True})
    with pytest.raises(AuthError, match="did not include a token"):
        _auth(tmp_path, remote_login=True).login("5551234567")
