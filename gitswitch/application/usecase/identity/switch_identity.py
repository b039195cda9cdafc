"""Switch identity use case."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from gitswitch.application.coordinator import SessionCoordinator
from gitswitch.application.usecase.base import BaseUseCase
from gitswitch.application.usecase.identity.add_identity import IdentityResponse
from gitswitch.domain.value import IdentityId


class SwitchIdentityRequest(BaseModel):
    """Switch identity request."""

    identity_id: str


class SwitchIdentityResponse(BaseModel):
    """Switch identity response.

    ``error`` is set when the identity was selected but live git or CLI
    state could not be fully updated.
    """

    identity: IdentityResponse
    error: Optional[str] = None


class SwitchIdentityUseCase(BaseUseCase):
    """Use case for switching the active identity and waiting for it to apply."""

    def __init__(self, coordinator: SessionCoordinator) -> None:
        self.coordinator = coordinator

    async def execute(self, request: SwitchIdentityRequest) -> SwitchIdentityResponse:
        """Execute switch flow.

        Raises:
            NotFoundError: If the identity does not exist
        """
        identity = self.coordinator.get(IdentityId(UUID(request.identity_id)))
        task = await self.coordinator.switch_to(identity)
        await task

        final = self.coordinator.get(identity.id)
        return SwitchIdentityResponse(
            identity=IdentityResponse.from_identity(final, active=True),
            error=self.coordinator.last_error,
        )
