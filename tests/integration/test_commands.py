from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from hb_cli.__main__ import app
from hb_cli.core.auth import AuthError, Session, User
from hb_cli.core.constants import STATUS_REPLY, UNCLEAR_REPLY


def _session() -> Session:
    now = datetime(2026, 2, 10, tzinfo=timezone.utc)
    return Session(token="tok", user=User(id="u1", phone_number="+15551234567", created_at=now, last_active=now))


class FakeAPI:
    def __init__(self, reachable: bool = True) -> None:
        self.reachable = reachable

    def get_health_data(self, days: int = 7) -> Dict[str, Any]:
        return {
            "success": True,
            "data": {
                "exerciseLogs": [
                    {
                        "id": "x1",
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

    def test_connection(self) -> Dict[str, Any]:
        if self.reachable:
            return {"success": True, "message": "API is reachable"}
        return {"success": False, "message": "API is not reachable: refused"}


def test_classify_json_output(runner, isolated_env: Path) -> None:
    result = runner.invoke(app, ["--json", "classify", "I ran for 30 minutes today"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["classification"] == {
        "category": "exercise",
        "processed": {"exercise": {"duration": 30, "type": "running"}},
        "confidence": 0.9,
    }
    assert payload["reply"] == "Your exercise has been logged. Great job on your 30-minute running!"
    assert not (isolated_env / "data" / "health_log.jsonl").exists()


def test_classify_plain_output(runner, isolated_env: Path) -> None:
    result = runner.invoke(app, ["--plain", "classify", "Had a salad with grilled chicken for lunch"])
    assert result.exit_code == 0
    assert "category\tfood" in result.stdout
    assert "details\tsalad with grilled chicken" in result.stdout
    assert "Salad with grilled chicken sounds nutritious!" in result.stdout


def test_log_then_summary(runner, isolated_env: Path) -> None:
    logged = runner.invoke(app, ["--json", "log", "I ran for 30 minutes today"])
    assert logged.exit_code == 0
    assert json.loads(logged.stdout)["stored"] is True

    food = runner.invoke(app, ["--json", "log", "Had a salad with grilled chicken for lunch"])
    assert food.exit_code == 0

    unclear = runner.invoke(app, ["--json", "log", "hello there"])
    payload = json.loads(unclear.stdout)
    assert payload["stored"] is False
    assert payload["reply"] == UNCLEAR_REPLY

    lines = (isolated_env / "data" / "health_log.jsonl").read_text().splitlines()
    assert len(lines) == 2

    summary = runner.invoke(app, ["--json", "summary", "--last-days", "1"])
    assert summary.exit_code == 0
    data = json.loads(summary.stdout)
    assert data["exerciseCount"] == 1
    assert data["averageExerciseDuration"] == 30
    assert data["exerciseTypes"] == {"running": 1}
    assert data["foodLogCount"] == 1


def test_log_status_writes_weekly_pdf(runner, isolated_env: Path) -> None:
    runner.invoke(app, ["log", "I walked 2 miles this morning"])
    result = runner.invoke(app, ["--json", "log", "status"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["reply"] == STATUS_REPLY
    assert payload["stored"] is False
    report = Path(payload["report"])
    assert report == (isolated_env / "reports" / "health-report.pdf").resolve()
    assert report.read_bytes().startswith(b"%PDF")


def test_login_session_logout(runner, isolated_env: Path) -> None:
    login = runner.invoke(app, ["--json", "login", "--phone", "+1 555 123 4567"])
    assert login.exit_code == 0
    assert json.loads(login.stdout)["user"]["phoneNumber"] == "+15551234567"

    session = runner.invoke(app, ["--plain", "session"])
    assert session.exit_code == 0
    assert "phone_number\t+15551234567" in session.stdout

    logout = runner.invoke(app, ["--json", "logout"])
    assert json.loads(logout.stdout)["logged_out"] is True

    missing = runner.invoke(app, ["--plain", "session"])
    assert missing.exit_code == 1
    assert "authenticated\tfalse" in missing.stdout


def test_login_rejects_bad_phone(runner, isolated_env: Path) -> None:
    result = runner.invoke(app, ["--plain", "login", "--phone", "call me"])
    assert result.exit_code == 1
    assert "Invalid phone number" in result.stdout


def test_messages_from_file(runner, isolated_env: Path, write_temp_json, sample_message_records) -> None:
    path = write_temp_json("messages.json", sample_message_records)
    result = runner.invoke(app, ["--json", "messages", "--file", str(path)])

    assert result.exit_code == 0
    messages = json.loads(result.stdout)["messages"]
    assert [message["id"] for message in messages] == ["m3", "response-m2", "m2", "response-m1", "m1"]
    assert messages[1]["type"] == "outgoing"
    assert messages[1]["content"] == "Your meal has been logged. Oatmeal sounds nutritious!"


def test_messages_requires_login(runner, isolated_env: Path) -> None:
    result = runner.invoke(app, ["--plain", "messages"])
    assert result.exit_code == 1
    assert "Not logged in" in result.stdout


def test_health_data_command(monkeypatch, runner, isolated_env: Path) -> None:
    monkeypatch.setattr("hb_cli.commands.messages.current_session", lambda state: _session())
    monkeypatch.setattr("hb_cli.commands.messages.build_api", lambda state, session=None: FakeAPI())

    result = runner.invoke(app, ["--json", "health-data", "--days", "3"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["days"] == 3
    assert payload["entries"][0]["id"] == "x1"


def test_health_data_auth_error(monkeypatch, runner, isolated_env: Path) -> None:
    def no_session(state):  # type: ignore[no-untyped-def]
        raise AuthError("Not logged in. Run `hb login --phone <number>` first.")

    monkeypatch.setattr("hb_cli.commands.messages.current_session", no_session)
    result = runner.invoke(app, ["--json", "health-data"])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["status"] == "error"


def test_ping_command(monkeypatch, runner, isolated_env: Path) -> None:
    monkeypatch.setattr("hb_cli.commands.messages.build_api", lambda state, session=None: FakeAPI())
    ok = runner.invoke(app, ["--plain", "ping"])
    assert ok.exit_code == 0
    assert "success\ttrue" in ok.stdout

    monkeypatch.setattr("hb_cli.commands.messages.build_api", lambda state, session=None: FakeAPI(False))
    down = runner.invoke(app, ["--plain", "ping"])
    assert down.exit_code == 1
    assert "not reachable" in down.stdout


def test_report_csv_from_file(runner, isolated_env: Path, write_temp_json, sample_message_records) -> None:
    messages = write_temp_json("messages.json", sample_message_records)
    out = isolated_env / "out.csv"
    result = runner.invoke(
        app,
        [
            "--json",
            "report",
            "--format",
            "csv",
            "--source",
            "file",
            "--file",
            str(messages),
            "--start-date",
            "2026-02-09",
            "--end-date",
            "2026-02-11",
            "--output-file",
            str(out),
        ],
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["count"] == 2
    assert payload["path"] == str(out)
    assert out.read_text().splitlines()[0].startswith("id,timestamp,category")


def test_report_pdf_from_local_store(runner, isolated_env: Path) -> None:
    runner.invoke(app, ["log", "I did pilates for 2 hours"])
    result = runner.invoke(app, ["--plain", "report", "--last-days", "7"])

    assert result.exit_code == 0
    assert "format\tpdf" in result.stdout
    assert "count\t1" in result.stdout
    assert (isolated_env / "reports" / "health-report.pdf").exists()


def test_report_rejects_unknown_format(runner, isolated_env: Path) -> None:
    result = runner.invoke(app, ["report", "--format", "docx"])
    assert result.exit_code == 2


def test_summary_rejects_bad_date(runner, isolated_env: Path) -> None:
    result = runner.invoke(app, ["summary", "--start-date", "02/10/2026"])
    assert result.exit_code == 2


def test_templates_flow(runner, isolated_env: Path) -> None:
    listed = runner.invoke(app, ["--json", "templates", "list"])
    assert [t["name"] for t in json.loads(listed.stdout)["templates"]] == [
        "Regular Exercise",
        "Daily Food Tracking",
    ]

    added = runner.invoke(
        app,
        ["--json", "templates", "add", "--name", "Hydration", "--category", "food", "--frequency", "daily"],
    )
    assert added.exit_code == 0
    created = json.loads(added.stdout)
    assert created["status"] == "created"
    template_id = created["template"]["id"]

    toggled = runner.invoke(app, ["--json", "templates", "toggle", template_id])
    assert json.loads(toggled.stdout)["template"]["active"] is False

    edited = runner.invoke(app, ["--json", "templates", "edit", template_id, "--frequency", "twice a day"])
    assert json.loads(edited.stdout)["template"]["frequency"] == "twice a day"

    deleted = runner.invoke(app, ["--plain", "templates", "delete", "1"])
    assert deleted.exit_code == 0

    remaining = runner.invoke(app, ["--json", "templates", "list"])
    assert [t["id"] for t in json.loads(remaining.stdout)["templates"]] == ["2", template_id]


def test_templates_validation_error(runner, isolated_env: Path) -> None:
    result = runner.invoke(
        app,
        ["--plain", "templates", "add", "--name", "Sleep", "--category", "sleep", "--frequency", "nightly"],
    )
    assert result.exit_code == 1
    assert "Unknown category" in result.stdout


def test_invalid_config_exits_with_code_2(runner, isolated_env: Path) -> None:
    (isolated_env / "config.toml").write_text("[api\nmax_retries = 3")
    result = runner.invoke(app, ["classify", "hi"])
    assert result.exit_code == 2
    assert "Config error" in result.stdout


def test_config_extra_keywords_reach_classifier(runner, isolated_env: Path) -> None:
    (isolated_env / "config.toml").write_text('[classification]\nextra_exercise_keywords = ["tennis"]\n')
    result = runner.invoke(app, ["--json", "classify", "played tennis for 60 minutes"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["classification"]["processed"] == {
        "exercise": {"duration": 60, "type": "tennis"}
    }


def test_twilio_setup_and_show(runner, isolated_env: Path) -> None:
    missing = runner.invoke(app, ["--json", "twilio", "show"])
    assert missing.exit_code == 1
    assert json.loads(missing.stdout)["account"]["isSetup"] is False

    setup = runner.invoke(
        app,
        [
            "--json",
            "twilio",
            "setup",
            "--account-sid",
            "AC123",
            "--auth-token",
            "secret-token",
            "--phone-number",
            "+15550001111",
        ],
    )
    assert setup.exit_code == 0
    assert json.loads(setup.stdout)["account"]["authToken"] == "********oken"

    shown = runner.invoke(app, ["--json", "twilio", "show", "--channel", "sms"])
    assert shown.exit_code == 0
    payload = json.loads(shown.stdout)
    assert payload["account"]["phoneNumber"] == "+15550001111"
    assert payload["webhookUrl"] == "https://your-backend-url.com/twilio-webhook"
    assert list(payload["instructions"]) == ["sms"]

    plain = runner.invoke(app, ["--plain", "twilio", "show", "--show-token"])
    assert "authToken\tsecret-token" in plain.stdout
    assert "whatsapp\t2\tOpen WhatsApp and message \"join\" to HealthBuddie" in plain.stdout


def test_twilio_setup_requires_all_fields(runner, isolated_env: Path) -> None:
    result = runner.invoke(app, ["--plain", "twilio", "setup", "--account-sid", "AC123"])
    assert result.exit_code == 1
    assert "Missing information: auth token, phone number" in result.stdout
    assert not (isolated_env / "data" / "twilio.json").exists()


def test_twilio_show_rejects_unknown_channel(runner, isolated_env: Path) -> None:
    result = runner.invoke(app, ["twilio", "show", "--channel", "voice"])
    assert result.exit_code == 2
