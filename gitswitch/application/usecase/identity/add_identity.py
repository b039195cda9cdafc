"""Add identity use case."""

from typing import Optional

import logfire
from pydantic import BaseModel, SecretStr

from gitswitch.adapter.error import GitHubAPIError
from gitswitch.adapter.github.api import GitHubAPIClient
from gitswitch.application.coordinator import SessionCoordinator
from gitswitch.application.usecase.base import BaseUseCase
from gitswitch.domain.error import ValidationError
from gitswitch.domain.model import Identity
from gitswitch.domain.value import RemoteUser


class AddIdentityRequest(BaseModel):
    """Add identity request."""

    display_name: str = ""  # Defaults to the remote username when a credential is given
    email: str = ""  # Defaults to the GitHub noreply address when a credential is given
    credential: SecretStr = SecretStr("")


class IdentityResponse(BaseModel):
    """Identity summary returned by identity use cases."""

    identity_id: str
    display_name: str
    email: str
    remote_username: Optional[str] = None
    has_credential: bool
    active: bool = False

    @classmethod
    def from_identity(cls, identity: Identity, active: bool = False) -> "IdentityResponse":
        return cls(
            identity_id=str(identity.id),
            display_name=identity.display_name,
            email=identity.email,
            remote_username=identity.remote_username,
            has_credential=identity.has_credential,
            active=active,
        )


class AddIdentityUseCase(BaseUseCase):
    """Use case for adding a managed identity."""

    def __init__(
        self,
        coordinator: SessionCoordinator,
        api_client: GitHubAPIClient,
        hostname: str = "github.com",
    ) -> None:
        """Initialize add identity use case.

        Args:
            coordinator: Session coordinator
            api_client: Resolves the account behind a credential
            hostname: Host used to build the default noreply email
        """
        self.coordinator = coordinator
        self.api_client = api_client
        self.hostname = hostname

    async def _lookup(self, token: str) -> Optional[RemoteUser]:
        try:
            return await self.api_client.fetch_user(token)
        except GitHubAPIError as e:
            logfire.warn("Could not resolve credential owner", error=e.message)
            return None

    async def execute(self, request: AddIdentityRequest) -> IdentityResponse:
        """Execute add identity flow.

        Steps:
        1. If a credential is given, look up its owner (best-effort)
        2. Default name and email from the remote account
        3. Append the identity to the session

        Raises:
            ValidationError: If email or display name end up empty
        """
        token = request.credential.get_secret_value().strip()
        remote_user = await self._lookup(token) if token else None

        email = request.email.strip()
        if not email and remote_user is not None:
            email = f"{remote_user.username}@users.noreply.{self.hostname}"
        if not email:
            raise ValidationError("Email is required")

        display_name = request.display_name.strip()
        if not display_name and remote_user is not None:
            display_name = remote_user.username
        if not display_name:
            raise ValidationError("Name is required")

        identity = Identity(display_name=display_name, email=email, credential=token)
        if remote_user is not None:
            identity = identity.with_remote_user(remote_user)

        await self.coordinator.add_identity(identity)
        return IdentityResponse.from_identity(identity)
