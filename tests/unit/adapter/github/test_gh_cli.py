"""Unit tests for the GitHub CLI client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from gitswitch.adapter.error import (
    CLINotInstalledError,
    CommandFailedError,
    InstallationFailedError,
    PackageManagerNotFoundError,
)
from gitswitch.adapter.github.cli import (
    MockGitHubCLIClient,
    RealGitHubCLIClient,
    parse_auth_status,
)
from gitswitch.domain.value import CLIInstallStatus, RemoteUser

GH = "/opt/homebrew/bin/gh"
BREW = "/opt/homebrew/bin/brew"

TWO_ACCOUNTS_STATUS = """github.com
  ✓ Logged in to github.com account alice (keyring)
  - Active account: false
  - Git operations protocol: https
  ✓ Logged in to github.com account bob (keyring)
  - Active account: true
  - Git operations protocol: https
"""


def _mock_process(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0):
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    return process


def _executables(gh: bool = True, brew: bool = True):
    def find(name, search_paths):
        if name == "gh":
            return GH if gh else None
        if name == "brew":
            return BREW if brew else None
        return None

    return find


class TestParseAuthStatus:
    """Tests for parse_auth_status."""

    def test_multiple_accounts_with_active_flag(self):
        accounts = parse_auth_status(TWO_ACCOUNTS_STATUS, "github.com")

        assert accounts == [("alice", False), ("bob", True)]

    def test_legacy_format_counts_as_active(self):
        output = "github.com\n  ✓ Logged in to github.com as octocat (oauth_token)\n"

        assert parse_auth_status(output, "github.com") == [("octocat", True)]

    def test_other_hosts_ignored(self):
        output = (
            "  ✓ Logged in to ghe.example.com account corp (keyring)\n"
            "  - Active account: true\n"
            "  ✓ Logged in to github.com account alice (keyring)\n"
            "  - Active account: false\n"
        )

        assert parse_auth_status(output, "github.com") == [("alice", False)]

    def test_not_logged_in(self):
        output = "You are not logged into any GitHub hosts. To log in, run: gh auth login\n"

        assert parse_auth_status(output, "github.com") == []


class TestRealGitHubCLIClient:
    """Tests for RealGitHubCLIClient."""

    @pytest.fixture
    def api_client(self):
        client = MagicMock()
        client.fetch_user = AsyncMock(return_value=RemoteUser(username="alice"))
        return client

    @pytest.fixture
    def cli(self, api_client):
        return RealGitHubCLIClient(api_client=api_client)

    @pytest.fixture
    def gh_installed(self):
        with patch(
            "gitswitch.adapter.github.cli.find_executable", side_effect=_executables()
        ):
            yield

    def test_installation_status(self, cli):
        with patch(
            "gitswitch.adapter.github.cli.find_executable",
            side_effect=_executables(gh=True),
        ):
            assert cli.installation_status() == CLIInstallStatus.INSTALLED

        with patch(
            "gitswitch.adapter.github.cli.find_executable",
            side_effect=_executables(gh=False, brew=True),
        ):
            assert cli.installation_status() == CLIInstallStatus.NOT_INSTALLED

        with patch(
            "gitswitch.adapter.github.cli.find_executable",
            side_effect=_executables(gh=False, brew=False),
        ):
            assert cli.installation_status() == CLIInstallStatus.PACKAGE_MANAGER_MISSING

    @pytest.mark.asyncio
    async def test_token_passed_on_stdin(self, cli, gh_installed):
        # Arrange
        mock_proc = _mock_process()

        # Act
        with patch(
            "asyncio.create_subprocess_exec", return_value=mock_proc
        ) as mock_exec:
            await cli.login_with_token("ghp_secret_token", "github.com")

        # Assert
        args = mock_exec.call_args.args
        assert args == (GH, "auth", "login", "--with-token", "--hostname", "github.com")
        assert "ghp_secret_token" not in " ".join(args)
        mock_proc.communicate.assert_awaited_once_with(input=b"ghp_secret_token")

    @pytest.mark.asyncio
    async def test_switch_to_known_account(self, cli, api_client, gh_installed):
        # Arrange
        status = _mock_process(stdout=TWO_ACCOUNTS_STATUS.encode(), returncode=0)
        switch = _mock_process()

        # Act
        with patch(
            "asyncio.create_subprocess_exec", side_effect=[status, switch]
        ) as mock_exec:
            await cli.switch_account("ghp_alice", "github.com")

        # Assert
        commands = [call.args[1:] for call in mock_exec.call_args_list]
        assert commands == [
            ("auth", "status", "--hostname", "github.com"),
            ("auth", "switch", "--hostname", "github.com", "--user", "alice"),
        ]
        api_client.fetch_user.assert_awaited_once_with("ghp_alice")

    @pytest.mark.asyncio
    async def test_unknown_account_logs_in_with_token(self, cli, api_client, gh_installed):
        # Arrange
        api_client.fetch_user.return_value = RemoteUser(username="carol")
        status = _mock_process(stdout=TWO_ACCOUNTS_STATUS.encode())
        login = _mock_process()

        # Act
        with patch(
            "asyncio.create_subprocess_exec", side_effect=[status, login]
        ) as mock_exec:
            await cli.switch_account("ghp_carol", "github.com")

        # Assert
        commands = [call.args[1:] for call in mock_exec.call_args_list]
        assert commands[1] == ("auth", "login", "--with-token", "--hostname", "github.com")
        assert not any("logout" in command for command in commands)
        login.communicate.assert_awaited_once_with(input=b"ghp_carol")

    @pytest.mark.asyncio
    async def test_switch_without_gh_raises(self, cli):
        with patch(
            "gitswitch.adapter.github.cli.find_executable",
            side_effect=_executables(gh=False),
        ):
            with pytest.raises(CLINotInstalledError):
                await cli.switch_account("ghp_alice", "github.com")

    @pytest.mark.asyncio
    async def test_current_user_returns_active_account(self, cli, gh_installed):
        status = _mock_process(stdout=b"", stderr=TWO_ACCOUNTS_STATUS.encode())

        with patch("asyncio.create_subprocess_exec", return_value=status):
            assert await cli.current_user("github.com") == "bob"

    @pytest.mark.asyncio
    async def test_current_user_none_when_logged_out(self, cli, gh_installed):
        status = _mock_process(
            stderr=b"You are not logged into any GitHub hosts.", returncode=1
        )

        with patch("asyncio.create_subprocess_exec", return_value=status):
            assert await cli.current_user("github.com") is None

    @pytest.mark.asyncio
    async def test_user_info_parses_json(self, cli, gh_installed):
        output = b'{"login": "alice", "avatar_url": "https://example.com/a.png"}'

        with patch(
            "asyncio.create_subprocess_exec", return_value=_mock_process(stdout=output)
        ):
            user = await cli.user_info("github.com")

        assert user == RemoteUser(username="alice", avatar_url="https://example.com/a.png")

    @pytest.mark.asyncio
    async def test_user_info_bad_output(self, cli, gh_installed):
        with patch(
            "asyncio.create_subprocess_exec", return_value=_mock_process(stdout=b"oops")
        ):
            with pytest.raises(CommandFailedError):
                await cli.user_info("github.com")

    @pytest.mark.asyncio
    async def test_auth_token_empty_raises(self, cli, gh_installed):
        with patch(
            "asyncio.create_subprocess_exec", return_value=_mock_process(stdout=b"\n")
        ):
            with pytest.raises(CommandFailedError) as exc_info:
                await cli.auth_token("github.com")

        assert "No authentication token found" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_login_interactive_streams_output(self, cli, gh_installed):
        mock_proc = MagicMock()
        mock_proc.stdout.read = AsyncMock(side_effect=[b"Press Enter\n", b""])
        mock_proc.wait = AsyncMock(return_value=0)
        lines: list[str] = []

        with patch(
            "asyncio.create_subprocess_exec", return_value=mock_proc
        ) as mock_exec:
            await cli.login_interactive("github.com", lines.append)

        assert lines == ["Press Enter\n"]
        assert mock_exec.call_args.args[1:] == (
            "auth",
            "login",
            "--hostname",
            "github.com",
            "--web",
        )

    @pytest.mark.asyncio
    async def test_login_interactive_failure(self, cli, gh_installed):
        mock_proc = MagicMock()
        mock_proc.stdout.read = AsyncMock(side_effect=[b""])
        mock_proc.wait = AsyncMock(return_value=1)

        with patch("asyncio.create_subprocess_exec", return_value=mock_proc):
            with pytest.raises(CommandFailedError) as exc_info:
                await cli.login_interactive("github.com", lambda _: None)

        assert "Authentication failed" in exc_info.value.message


class TestInstall:
    """Tests for installing gh through Homebrew."""

    @pytest.fixture
    def cli(self):
        return RealGitHubCLIClient(api_client=MagicMock())

    @pytest.mark.asyncio
    async def test_missing_package_manager(self, cli):
        with patch(
            "gitswitch.adapter.github.cli.find_executable",
            side_effect=_executables(gh=False, brew=False),
        ):
            with pytest.raises(PackageManagerNotFoundError):
                await cli.install()

    @pytest.mark.asyncio
    async def test_brew_failure(self, cli):
        failing = _mock_process(stderr=b"Error: No available formula", returncode=1)

        with (
            patch(
                "gitswitch.adapter.github.cli.find_executable",
                side_effect=_executables(gh=False, brew=True),
            ),
            patch("asyncio.create_subprocess_exec", return_value=failing),
        ):
            with pytest.raises(CommandFailedError):
                await cli.install()

    @pytest.mark.asyncio
    async def test_gh_still_missing_after_install(self, cli):
        with (
            patch(
                "gitswitch.adapter.github.cli.find_executable",
                side_effect=_executables(gh=False, brew=True),
            ),
            patch("asyncio.create_subprocess_exec", return_value=_mock_process()),
        ):
            with pytest.raises(InstallationFailedError):
                await cli.install()

    @pytest.mark.asyncio
    async def test_install_runs_brew(self, cli):
        # gh missing before install, present afterwards
        installed = {"gh": False}

        def find(name, search_paths):
            if name == "brew":
                return BREW
            return GH if installed["gh"] else None

        def run_brew(*args, **kwargs):
            installed["gh"] = True
            return _mock_process()

        with (
            patch("gitswitch.adapter.github.cli.find_executable", side_effect=find),
            patch("asyncio.create_subprocess_exec", side_effect=run_brew) as mock_exec,
        ):
            await cli.install()

        assert mock_exec.call_args.args == (BREW, "install", "gh")


class TestMockGitHubCLIClient:
    """Tests for MockGitHubCLIClient."""

    @pytest.mark.asyncio
    async def test_tokens_never_journaled(self):
        journal: list[tuple] = []
        cli = MockGitHubCLIClient(journal=journal)

        await cli.switch_account("ghp_secret", "github.com")
        await cli.setup_git()

        assert journal == [("gh.switch_account", "github.com"), ("gh.setup_git",)]
        assert all("ghp_secret" not in entry for entry in journal)

    @pytest.mark.asyncio
    async def test_configured_error_raised(self):
        cli = MockGitHubCLIClient()
        cli.errors["setup_git"] = CommandFailedError("boom")

        with pytest.raises(CommandFailedError):
            await cli.setup_git()
