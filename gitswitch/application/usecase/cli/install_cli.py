"""GitHub CLI installation use cases."""

import logfire

from gitswitch.application.usecase.base import BaseUseCase
from gitswitch.domain.service import HostingCLIClient
from gitswitch.domain.value import CLIStatusReport


class CLIStatusUseCase(BaseUseCase):
    """Use case for reporting whether the GitHub CLI can be used."""

    def __init__(self, cli: HostingCLIClient) -> None:
        self.cli = cli

    async def execute(self) -> CLIStatusReport:
        return CLIStatusReport(status=self.cli.installation_status())


class InstallCLIUseCase(BaseUseCase):
    """Use case for installing the GitHub CLI through Homebrew."""

    def __init__(self, cli: HostingCLIClient) -> None:
        self.cli = cli

    async def execute(self) -> CLIStatusReport:
        """Install gh.

        Returns:
            Status after installation

        Raises:
            PackageManagerNotFoundError: If Homebrew is missing
            InstallationFailedError: If gh is still missing afterwards
            CommandFailedError: If the install command fails
        """
        with logfire.span("install_cli.execute"):
            await self.cli.install()
        return CLIStatusReport(status=self.cli.installation_status())
