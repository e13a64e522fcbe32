from click.testing import CliRunner

from tool_helper.cli import cli


def test_antidetect_rejects_unknown_platform(monkeypatch):
    monkeypatch.setattr("tool_helper.cli.load_dotenv", lambda: False)
    monkeypatch.delenv("ANTIDETECT_TYPE", raising=False)
    runner = CliRunner()
    result = runner.invoke(cli, ["antidetect", "--type", "adspower", "--base-url", "http://x", "folders"])
    assert result.exit_code == 1
    assert "Invalid platform type" in result.output


def test_notify_requires_token(monkeypatch):
    monkeypatch.setattr("tool_helper.cli.load_dotenv", lambda: False)
    monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
    result = CliRunner().invoke(cli, ["notify", "hello"])
    assert result.exit_code == 1
    assert "token is required" in result.output
