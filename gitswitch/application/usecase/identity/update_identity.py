"""Update identity use case."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, SecretStr

from gitswitch.application.coordinator import SessionCoordinator
from gitswitch.application.usecase.base import BaseUseCase
from gitswitch.application.usecase.identity.add_identity import IdentityResponse
from gitswitch.domain.error import ValidationError
from gitswitch.domain.value import IdentityId


class UpdateIdentityRequest(BaseModel):
    """Update identity request. Unset fields keep their current value."""

    identity_id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    credential: Optional[SecretStr] = None


class UpdateIdentityResponse(BaseModel):
    """Update identity response."""

    identity: IdentityResponse
    reapplied: bool  # The identity was active and was switched to again
    error: Optional[str] = None


class UpdateIdentityUseCase(BaseUseCase):
    """Use case for editing an identity."""

    def __init__(self, coordinator: SessionCoordinator) -> None:
        self.coordinator = coordinator

    async def execute(self, request: UpdateIdentityRequest) -> UpdateIdentityResponse:
        """Apply the edit, waiting for the re-switch if the identity is active.

        Raises:
            NotFoundError: If the identity does not exist
            ValidationError: If a field is set to an empty value
        """
        current = self.coordinator.get(IdentityId(UUID(request.identity_id)))

        changes: dict = {}
        if request.display_name is not None:
            if not request.display_name.strip():
                raise ValidationError("Name is required")
            changes["display_name"] = request.display_name.strip()
        if request.email is not None:
            if not request.email.strip():
                raise ValidationError("Email is required")
            changes["email"] = request.email.strip()
        if request.credential is not None:
            changes["credential"] = SecretStr(request.credential.get_secret_value().strip())
            # Cached remote account belongs to the old credential
            changes["remote_username"] = None
            changes["avatar_url"] = None

        updated = current.model_copy(update=changes)
        task = await self.coordinator.update_identity(updated)
        if task is not None:
            await task

        final = self.coordinator.get(updated.id)
        return UpdateIdentityResponse(
            identity=IdentityResponse.from_identity(
                final, active=self.coordinator.active_id == final.id
            ),
            reapplied=task is not None,
            error=self.coordinator.last_error if task is not None else None,
        )
