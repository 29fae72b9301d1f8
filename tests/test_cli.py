"""Tests for the rcon command line entry point."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from source_rcon import cli
from source_rcon.config import RconSettings
from source_rcon.errors import (
    RconAuthError,
    RconEncodingError,
    RconFramingError,
    RconTimeout,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep RCON_* variables from the outer environment out of the tests."""
    for name in ("RCON_ENDPOINT", "RCON_PASSWORD", "RCON_COMMAND", "RCON_TIMEOUT", "RCON_CONFIG"):
        monkeypatch.delenv(name, raising=False)


class TestMain:
    """Tests for cli.main()."""

    def test_prints_output(self, capsys: pytest.CaptureFixture[str]):
        with patch("source_rcon.cli._run", AsyncMock(return_value="There are 0 players")) as run:
            code = cli.main(["-e", "127.0.0.1:25575", "-p", "pw", "list"])

        assert code == cli.EXIT_OK
        assert capsys.readouterr().out == "There are 0 players\n"
        run.assert_awaited_once_with(RconSettings("127.0.0.1:25575", "pw"), "list")

    def test_command_words_are_joined(self):
        with patch("source_rcon.cli._run", AsyncMock(return_value="")) as run:
            cli.main(["-e", "h:1", "-p", "pw", "say", "hello", "world"])

        assert run.await_args.args[1] == "say hello world"

    def test_environment_fallback(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RCON_ENDPOINT", "h:1")
        monkeypatch.setenv("RCON_PASSWORD", "pw")
        monkeypatch.setenv("RCON_COMMAND", "status")

        with patch("source_rcon.cli._run", AsyncMock(return_value="ok")) as run:
            code = cli.main([])

        assert code == cli.EXIT_OK
        run.assert_awaited_once_with(RconSettings("h:1", "pw"), "status")

    def test_lenient_flag(self):
        with patch("source_rcon.cli._run", AsyncMock(return_value="")) as run:
            cli.main(["-e", "h:1", "-p", "pw", "--lenient", "--timeout", "2", "status"])

        assert run.await_args.args[0] == RconSettings("h:1", "pw", timeout=2.0, lenient=True)

    def test_missing_command(self):
        assert cli.main(["-e", "h:1", "-p", "pw"]) == cli.EXIT_CONFIG

    def test_missing_endpoint(self):
        assert cli.main(["-p", "pw", "status"]) == cli.EXIT_CONFIG

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (RconAuthError(-1), cli.EXIT_AUTH),
            (RconFramingError("Broken packet"), cli.EXIT_FRAMING),
            (RconTimeout("timed out"), cli.EXIT_CONNECTION),
            (RconEncodingError("NUL"), cli.EXIT_ERROR),
        ],
    )
    def test_error_exit_codes(
        self, error: Exception, expected: int, capsys: pytest.CaptureFixture[str]
    ):
        with patch("source_rcon.cli._run", AsyncMock(side_effect=error)):
            code = cli.main(["-e", "h:1", "-p", "pw", "status"])

        assert code == expected
        assert capsys.readouterr().out == ""
