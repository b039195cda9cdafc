"""Login with CLI use case."""

from typing import Optional

import logfire
from pydantic import BaseModel

from gitswitch.application.coordinator import SessionCoordinator
from gitswitch.application.usecase.base import BaseUseCase
from gitswitch.application.usecase.identity.add_identity import IdentityResponse
from gitswitch.domain.model import Identity
from gitswitch.domain.service import HostingCLIClient, OutputSink


class LoginWithCLIRequest(BaseModel):
    """Login with CLI request."""

    display_name: str = ""  # Defaults to the GitHub username
    email: str = ""  # Defaults to the GitHub noreply address


class LoginWithCLIUseCase(BaseUseCase):
    """Use case for creating an identity through ``gh auth login --web``."""

    def __init__(
        self,
        coordinator: SessionCoordinator,
        cli: HostingCLIClient,
        hostname: str = "github.com",
    ) -> None:
        """Initialize login with CLI use case.

        Args:
            coordinator: Session coordinator
            cli: Hosting provider CLI client
            hostname: Host to log in to
        """
        self.coordinator = coordinator
        self.cli = cli
        self.hostname = hostname

    async def execute(
        self, request: LoginWithCLIRequest, on_output: Optional[OutputSink] = None
    ) -> IdentityResponse:
        """Execute CLI login flow.

        Steps:
        1. Run the interactive browser login, streaming its output
        2. Read the token gh stored for the new session
        3. Fetch the account's username and avatar
        4. Create and add the identity

        Raises:
            CLINotInstalledError: If gh is not installed
            CommandFailedError: If any gh step fails
        """
        with logfire.span("login_with_cli.execute", hostname=self.hostname):
            await self.cli.login_interactive(self.hostname, on_output or (lambda _: None))
            token = await self.cli.auth_token(self.hostname)
            remote_user = await self.cli.user_info(self.hostname)

            identity = Identity(
                display_name=request.display_name.strip() or remote_user.username,
                email=request.email.strip()
                or f"{remote_user.username}@users.noreply.{self.hostname}",
                credential=token,
            ).with_remote_user(remote_user)

            await self.coordinator.add_identity(identity)
            return IdentityResponse.from_identity(identity)
