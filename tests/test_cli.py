"""CLI tests (click's CliRunner, no server started)."""

from click.testing import CliRunner

from canwegame.cli.main import cli


def test_gen_secret_is_long_enough_for_settings():
    result = CliRunner().invoke(cli, ["gen-secret"])
    assert result.exit_code == 0
    secret = result.output.strip()
    assert len(secret) >= 32


def test_gen_secret_is_random():
    runner = CliRunner()
    first = runner.invoke(cli, ["gen-secret"]).output
    second = runner.invoke(cli, ["gen-secret"]).output
    assert first != second


def test_gen_secret_bytes_option():
    result = CliRunner().invoke(cli, ["gen-secret", "--bytes", "16"])
    assert result.exit_code == 0
    # token_urlsafe: 16 bytes → 22 base64url characters
    assert len(result.output.strip()) == 22


def test_help_lists_commands():
    result = CliRunner().invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("serve", "init-db", "gen-secret"):
        assert command in result.output
