"""Device login use cases."""

from typing import Optional

import httpx
import logfire
from pydantic import BaseModel

from gitswitch.adapter.github.device_flow import DeviceFlowAuthenticator, StateListener
from gitswitch.application.usecase.base import BaseUseCase
from gitswitch.config import Settings
from gitswitch.domain.repository import SessionStateRepository


async def effective_client_id(
    repository: SessionStateRepository, settings: Settings
) -> str:
    """Client ID for the device flow: the stored one, else the configured one."""
    try:
        stored = await repository.load_client_id()
    except Exception as e:
        logfire.warn("Failed to load stored client ID", error=str(e))
        stored = None
    return stored or settings.github.client_id


class DeviceLoginUseCase(BaseUseCase):
    """Use case for starting a device authorization flow."""

    def __init__(
        self,
        repository: SessionStateRepository,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize device login use case.

        Args:
            repository: Holds the stored client ID
            settings: Application settings
            transport: Optional httpx transport for the authenticator
        """
        self.repository = repository
        self.settings = settings
        self.transport = transport

    async def execute(
        self, on_change: Optional[StateListener] = None
    ) -> DeviceFlowAuthenticator:
        """Build an authenticator with the effective client ID and start it.

        Returns:
            The started authenticator; its state is ``waiting_for_auth`` on
            success or ``error`` otherwise
        """
        authenticator = DeviceFlowAuthenticator(
            client_id=await effective_client_id(self.repository, self.settings),
            settings=self.settings.github,
            transport=self.transport,
            on_change=on_change,
        )
        await authenticator.start()
        return authenticator


class SetClientIdRequest(BaseModel):
    """Set client ID request."""

    client_id: str


class SetClientIdUseCase(BaseUseCase):
    """Use case for storing the OAuth app client ID."""

    def __init__(self, repository: SessionStateRepository) -> None:
        self.repository = repository

    async def execute(self, request: SetClientIdRequest) -> None:
        """Store the client ID; an empty value clears it."""
        await self.repository.save_client_id(request.client_id.strip() or None)
        logfire.info("Device flow client ID updated", configured=bool(request.client_id.strip()))
