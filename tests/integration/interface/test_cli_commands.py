"""Integration tests for the typer command-line interface.

Each command builds its own container; state is carried between commands
by the SQLite database in a temporary data directory.
"""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from gitswitch.interface.cli.app import app
from tests.di import build_test_container


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("GITSWITCH_ENVIRONMENT", "test")
    monkeypatch.setenv("GITSWITCH_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("GITSWITCH_GITHUB__CLIENT_ID", raising=False)

    with (
        patch(
            "gitswitch.interface.cli.app.create_container",
            side_effect=lambda: build_test_container(unmock={"persistence"}),
        ),
        patch("gitswitch.interface.cli.app.setup_logging"),
        patch("gitswitch.interface.cli.app.configure_logfire"),
        patch("gitswitch.interface.cli.app.instrument_httpx"),
    ):
        yield CliRunner()


class TestIdentityCommands:
    """Tests for list, add, switch and remove."""

    def test_list_empty(self, runner):
        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "No identities" in result.output

    def test_add_then_list(self, runner):
        # Act
        added = runner.invoke(app, ["add", "--name", "Alice", "--email", "alice@example.com"])
        listed = runner.invoke(app, ["list"])

        # Assert
        assert added.exit_code == 0
        assert "Added" in added.output
        assert "Alice <alice@example.com>" in listed.output
        assert "[no credential]" in listed.output

    def test_add_with_token_uses_account_defaults(self, runner):
        result = runner.invoke(app, ["add", "--token", "ghp_cli_token"])

        assert result.exit_code == 0
        assert "mockuser <mockuser@users.noreply.github.com> @mockuser" in result.output
        assert "ghp_cli_token" not in result.output

    def test_add_without_email_fails(self, runner):
        result = runner.invoke(app, ["add", "--name", "Alice"])

        assert result.exit_code == 1
        assert "Error: Email is required" in result.output

    def test_switch_marks_active(self, runner):
        runner.invoke(app, ["add", "--name", "Alice", "--email", "alice@example.com"])
        runner.invoke(app, ["add", "--name", "Bob", "--email", "bob@example.com"])

        switched = runner.invoke(app, ["switch", "bob@example.com"])
        listed = runner.invoke(app, ["list"])

        assert switched.exit_code == 0
        assert "Switched to" in switched.output
        assert "* " in listed.output
        active_line = next(line for line in listed.output.splitlines() if line.startswith("*"))
        assert "Bob" in active_line

    def test_switch_unknown(self, runner):
        result = runner.invoke(app, ["switch", "nobody@example.com"])

        assert result.exit_code == 1
        assert "Identity not found: nobody@example.com" in result.output

    def test_remove_with_confirmation_flag(self, runner):
        runner.invoke(app, ["add", "--name", "Alice", "--email", "alice@example.com"])

        removed = runner.invoke(app, ["remove", "Alice", "--yes"])
        listed = runner.invoke(app, ["list"])

        assert removed.exit_code == 0
        assert "Removed Alice" in removed.output
        assert "No identities" in listed.output

    def test_remove_declined(self, runner):
        runner.invoke(app, ["add", "--name", "Alice", "--email", "alice@example.com"])

        result = runner.invoke(app, ["remove", "Alice"], input="n\n")
        listed = runner.invoke(app, ["list"])

        assert result.exit_code != 0
        assert "Alice <alice@example.com>" in listed.output

    def test_edit(self, runner):
        runner.invoke(app, ["add", "--name", "Alice", "--email", "alice@example.com"])

        result = runner.invoke(app, ["edit", "Alice", "--name", "Alice Smith"])

        assert result.exit_code == 0
        assert "Alice Smith <alice@example.com>" in result.output


class TestSetupCommands:
    """Tests for client ID, CLI status and device login."""

    def test_cli_status(self, runner):
        result = runner.invoke(app, ["cli-status"])

        assert result.exit_code == 0
        assert "GitHub CLI is installed and ready" in result.output

    def test_set_and_clear_client_id(self, runner):
        saved = runner.invoke(app, ["set-client-id", "Iv1.abc"])
        cleared = runner.invoke(app, ["set-client-id", ""])

        assert "Client ID saved" in saved.output
        assert "Client ID cleared" in cleared.output

    def test_device_login_without_client_id(self, runner):
        result = runner.invoke(app, ["login-device"])

        assert result.exit_code == 1
        assert "Client ID is missing" in result.output

    def test_login_cli(self, runner):
        result = runner.invoke(app, ["login-cli"])

        assert result.exit_code == 0
        assert "ABCD-1234" in result.output
        assert "mockuser <mockuser@users.noreply.github.com>" in result.output
