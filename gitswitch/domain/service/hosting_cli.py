"""Hosting provider command-line helper port."""

from collections.abc import Callable
from typing import Optional

from gitswitch.domain.value import CLIInstallStatus, RemoteUser

from .base import Service

OutputSink = Callable[[str], None]


class HostingCLIClient(Service):
    """Contract for the provider CLI (``gh`` for GitHub).

    All methods that run the CLI raise CLINotInstalledError when the
    executable cannot be found and CommandFailedError when it exits
    non-zero, unless documented otherwise.
    """

    def is_installed(self) -> bool:
        raise NotImplementedError

    def installation_status(self) -> CLIInstallStatus:
        """Three-valued status used to drive guided installation."""
        raise NotImplementedError

    async def install(self) -> None:
        """Install the CLI through the platform package manager.

        Raises:
            PackageManagerNotFoundError: If the package manager is absent
            InstallationFailedError: If the CLI is still missing afterwards
        """
        raise NotImplementedError

    async def login_with_token(self, token: str, hostname: str) -> None:
        """Authenticate the CLI with a bearer token passed on stdin."""
        raise NotImplementedError

    async def login_interactive(self, hostname: str, on_output: OutputSink) -> None:
        """Run the browser-based login, streaming output to ``on_output``.

        Resolves once the process exits.

        Raises:
            CommandFailedError: On non-zero exit, carrying the captured output
        """
        raise NotImplementedError

    async def logout(self, hostname: str) -> None:
        raise NotImplementedError

    async def setup_git(self) -> None:
        """Register the CLI as git's credential helper."""
        raise NotImplementedError

    async def current_user(self, hostname: str) -> Optional[str]:
        """Username of the active CLI account, None on any failure."""
        raise NotImplementedError

    async def switch_account(self, token: str, hostname: str) -> None:
        """Make the token's owner the active CLI account.

        Switches to an already authenticated account when possible,
        otherwise logs in with the token.
        """
        raise NotImplementedError

    async def user_info(self, hostname: str) -> RemoteUser:
        """Account details of the active CLI session."""
        raise NotImplementedError

    async def auth_token(self, hostname: str) -> str:
        """Token stored for the active CLI session.

        Raises:
            CommandFailedError: If the CLI has no stored token
        """
        raise NotImplementedError
