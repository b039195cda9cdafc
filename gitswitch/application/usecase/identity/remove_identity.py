"""Remove identity use case."""

from uuid import UUID

from pydantic import BaseModel

from gitswitch.application.coordinator import SessionCoordinator
from gitswitch.application.usecase.base import BaseUseCase
from gitswitch.domain.value import IdentityId


class RemoveIdentityRequest(BaseModel):
    """Remove identity request."""

    identity_id: str


class RemoveIdentityUseCase(BaseUseCase):
    """Use case for removing an identity."""

    def __init__(self, coordinator: SessionCoordinator) -> None:
        self.coordinator = coordinator

    async def execute(self, request: RemoveIdentityRequest) -> None:
        """Remove the identity.

        Raises:
            NotFoundError: If the identity does not exist
        """
        identity = self.coordinator.get(IdentityId(UUID(request.identity_id)))
        await self.coordinator.remove_identity(identity.id)
