from typer.testing import CliRunner

from hb_cli.__main__ import app


runner = CliRunner()


def test_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "--plain" in result.stdout
    commands = ["login", "logout", "session", "classify", "log", "messages", "summary", "report", "templates", "twilio"]
    for command in commands:
        assert command in result.stdout


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.stdout


def test_json_and_plain_are_mutually_exclusive() -> None:
    result = runner.invoke(app, ["--json", "--plain", "classify", "hi"])
    assert result.exit_code == 2
    assert "mutually exclusive" in result.stdout


def test_templates_help() -> None:
    result = runner.invoke(app, ["templates", "--help"])
    assert result.exit_code == 0
    for command in ["list", "add", "edit", "delete", "toggle"]:
        assert command in result.stdout
