"""GitHub CLI (``gh``) client.

Wraps the gh subcommands used to authenticate, switch accounts and wire gh
up as git's credential helper.
"""

import json
import re
from collections.abc import Sequence
from typing import Optional

import logfire

from gitswitch.adapter.error import (
    CLINotInstalledError,
    CommandFailedError,
    InstallationFailedError,
    PackageManagerNotFoundError,
)
from gitswitch.adapter.github.api import GitHubAPIClient
from gitswitch.adapter.process import (
    find_executable,
    run_checked,
    run_command,
    stream_command,
)
from gitswitch.domain.service.hosting_cli import HostingCLIClient, OutputSink
from gitswitch.domain.value import CLIInstallStatus, RemoteUser

# "Logged in to github.com account octocat (keyring)" and the older
# "Logged in to github.com as octocat (oauth_token)"
_LOGGED_IN = re.compile(r"Logged in to (\S+) (?:account|as) (\S+)")
_ACTIVE_FLAG = re.compile(r"Active account:\s*(true|false)")


def parse_auth_status(output: str, hostname: str) -> list[tuple[str, bool]]:
    """Extract the authenticated accounts from ``gh auth status`` output.

    Args:
        output: Combined stdout/stderr of the status command
        hostname: Only accounts on this host are returned

    Returns:
        (username, is_active) pairs in output order. Older gh versions
        print no active flag; their accounts are reported as active.
    """
    accounts: list[tuple[str, bool]] = []
    for line in output.splitlines():
        login = _LOGGED_IN.search(line)
        if login:
            if login.group(1) == hostname:
                accounts.append((login.group(2), True))
            else:
                accounts.append(("", False))  # Placeholder keeps flags aligned
            continue
        flag = _ACTIVE_FLAG.search(line)
        if flag and accounts:
            username, _ = accounts[-1]
            accounts[-1] = (username, flag.group(1) == "true")
    return [(username, active) for username, active in accounts if username]


class GitHubCLIClient(HostingCLIClient):
    """Base class for GitHub CLI clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealGitHubCLIClient(GitHubCLIClient):
    """GitHub CLI client that runs the gh executable."""

    def __init__(
        self,
        api_client: GitHubAPIClient,
        gh_paths: Sequence[str] = (),
        brew_paths: Sequence[str] = (),
    ) -> None:
        """Initialize GitHub CLI client.

        Args:
            api_client: REST client used to resolve a token's owner
            gh_paths: Install locations of gh checked before PATH
            brew_paths: Install locations of Homebrew checked before PATH
        """
        self.api_client = api_client
        self.gh_paths = list(gh_paths)
        self.brew_paths = list(brew_paths)

    def _gh_path(self) -> Optional[str]:
        return find_executable("gh", self.gh_paths)

    def _brew_path(self) -> Optional[str]:
        return find_executable("brew", self.brew_paths)

    def _gh(self) -> str:
        path = self._gh_path()
        if path is None:
            raise CLINotInstalledError()
        return path

    def is_installed(self) -> bool:
        return self._gh_path() is not None

    def installation_status(self) -> CLIInstallStatus:
        if self.is_installed():
            return CLIInstallStatus.INSTALLED
        if self._brew_path() is not None:
            return CLIInstallStatus.NOT_INSTALLED
        return CLIInstallStatus.PACKAGE_MANAGER_MISSING

    async def install(self) -> None:
        brew = self._brew_path()
        if brew is None:
            raise PackageManagerNotFoundError()

        with logfire.span("gh.install"):
            await run_checked(brew, ["install", "gh"])

        if not self.is_installed():
            raise InstallationFailedError("gh not found after installation")
        logfire.info("GitHub CLI installed")

    async def login_with_token(self, token: str, hostname: str) -> None:
        await run_checked(
            self._gh(),
            ["auth", "login", "--with-token", "--hostname", hostname],
            stdin_data=token,
        )
        logfire.info("GitHub CLI logged in with token", hostname=hostname)

    async def login_interactive(self, hostname: str, on_output: OutputSink) -> None:
        gh = self._gh()
        with logfire.span("gh.login_interactive", hostname=hostname):
            result = await stream_command(
                gh, ["auth", "login", "--hostname", hostname, "--web"], on_output
            )
        if not result.ok:
            raise CommandFailedError(result.diagnostic or "Authentication failed")

    async def logout(self, hostname: str) -> None:
        await run_checked(self._gh(), ["auth", "logout", "--hostname", hostname])
        logfire.info("GitHub CLI logged out", hostname=hostname)

    async def setup_git(self) -> None:
        await run_checked(self._gh(), ["auth", "setup-git"])

    async def _auth_status(self, gh: str, hostname: str) -> str:
        # gh exits non-zero when nobody is logged in; the text is still useful
        result = await run_command(gh, ["auth", "status", "--hostname", hostname])
        return f"{result.stdout}\n{result.stderr}"

    async def current_user(self, hostname: str) -> Optional[str]:
        gh = self._gh_path()
        if gh is None:
            return None
        try:
            output = await self._auth_status(gh, hostname)
        except OSError as e:
            logfire.warn("gh auth status failed", error=str(e))
            return None

        accounts = parse_auth_status(output, hostname)
        for username, active in accounts:
            if active:
                return username
        return accounts[0][0] if accounts else None

    async def switch_account(self, token: str, hostname: str) -> None:
        """Activate the token's owner in gh.

        Never logs the previous account out. gh keeps every account it has
        seen, so an already known account is switched to and anything else
        is added with a token login.
        """
        gh = self._gh()
        output = await self._auth_status(gh, hostname)
        known = [username for username, _ in parse_auth_status(output, hostname)]

        owner = await self.api_client.fetch_user(token)

        if owner.username in known:
            logfire.info("Switching to known gh account", username=owner.username)
            await run_checked(
                gh, ["auth", "switch", "--hostname", hostname, "--user", owner.username]
            )
        else:
            logfire.info("Adding gh account with token", username=owner.username)
            await self.login_with_token(token, hostname)

    async def user_info(self, hostname: str) -> RemoteUser:
        output = await run_checked(self._gh(), ["api", "user", "--hostname", hostname])
        try:
            data = json.loads(output)
            return RemoteUser(username=data["login"], avatar_url=data.get("avatar_url"))
        except (ValueError, KeyError, TypeError) as e:
            raise CommandFailedError("Failed to parse user info") from e

    async def auth_token(self, hostname: str) -> str:
        output = await run_checked(self._gh(), ["auth", "token", "--hostname", hostname])
        token = output.strip()
        if not token:
            raise CommandFailedError("No authentication token found")
        return token


class MockGitHubCLIClient(GitHubCLIClient):
    """Mock GitHub CLI for testing.

    Keeps accounts in memory and records calls in ``journal`` as
    ``("gh.<operation>", ...)`` tuples. Tokens are never recorded.
    Setting ``errors[<operation>]`` makes that operation raise.
    """

    def __init__(
        self,
        installed: bool = True,
        package_manager: bool = True,
        journal: Optional[list[tuple]] = None,
    ) -> None:
        self.installed = installed
        self.package_manager = package_manager
        self.journal = journal if journal is not None else []
        self.errors: dict[str, Exception] = {}
        # token -> RemoteUser known to the fake API
        self.token_owners: dict[str, RemoteUser] = {}
        self.accounts: list[str] = []
        self.active_account: Optional[str] = None
        self.stored_token: Optional[str] = None
        self.login_output: list[str] = [
            "! First copy your one-time code: ABCD-1234\n",
            "Logged in as mockuser\n",
        ]

    def _record(self, operation: str, *args: object) -> None:
        self.journal.append((f"gh.{operation}", *args))
        if operation in self.errors:
            raise self.errors[operation]

    def _require_installed(self) -> None:
        if not self.installed:
            raise CLINotInstalledError()

    def _owner(self, token: str) -> RemoteUser:
        return self.token_owners.get(token, RemoteUser(username="mockuser"))

    def is_installed(self) -> bool:
        return self.installed

    def installation_status(self) -> CLIInstallStatus:
        if self.installed:
            return CLIInstallStatus.INSTALLED
        if self.package_manager:
            return CLIInstallStatus.NOT_INSTALLED
        return CLIInstallStatus.PACKAGE_MANAGER_MISSING

    async def install(self) -> None:
        if not self.package_manager:
            raise PackageManagerNotFoundError()
        self._record("install")
        self.installed = True

    async def login_with_token(self, token: str, hostname: str) -> None:
        self._require_installed()
        self._record("login_with_token", hostname)
        username = self._owner(token).username
        if username not in self.accounts:
            self.accounts.append(username)
        self.active_account = username
        self.stored_token = token

    async def login_interactive(self, hostname: str, on_output: OutputSink) -> None:
        self._require_installed()
        self._record("login_interactive", hostname)
        for chunk in self.login_output:
            on_output(chunk)
        if self.active_account is None:
            self.active_account = "mockuser"
        if self.stored_token is None:
            self.stored_token = "gho_mocktoken0000"

    async def logout(self, hostname: str) -> None:
        self._require_installed()
        self._record("logout", hostname)
        self.active_account = None

    async def setup_git(self) -> None:
        self._require_installed()
        self._record("setup_git")

    async def current_user(self, hostname: str) -> Optional[str]:
        return self.active_account if self.installed else None

    async def switch_account(self, token: str, hostname: str) -> None:
        self._require_installed()
        self._record("switch_account", hostname)
        username = self._owner(token).username
        if username not in self.accounts:
            self.accounts.append(username)
        self.active_account = username
        self.stored_token = token

    async def user_info(self, hostname: str) -> RemoteUser:
        self._require_installed()
        self._record("user_info", hostname)
        if self.stored_token is not None:
            return self._owner(self.stored_token)
        return RemoteUser(username=self.active_account or "mockuser")

    async def auth_token(self, hostname: str) -> str:
        self._require_installed()
        self._record("auth_token", hostname)
        if not self.stored_token:
            raise CommandFailedError("No authentication token found")
        return self.stored_token
