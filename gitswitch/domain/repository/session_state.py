"""Session state repository interface."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Optional

from gitswitch.domain.model import Identity
from gitswitch.domain.value import IdentityId


class SessionStateRepository(ABC):
    """Durable storage for the identity list, active pointer and client id.

    Implementations must preserve list order. Credentials are part of the
    Identity model but implementations decide where they are kept.
    """

    @abstractmethod
    async def load_identities(self) -> list[Identity]:
        """Load the stored identity list.

        Returns:
            Identities in insertion order, empty if nothing is stored
        """
        pass

    @abstractmethod
    async def save_identities(
        self,
        identities: list[Identity],
        removed_ids: Iterable[IdentityId] = (),
    ) -> None:
        """Replace the stored identity list.

        Stored credentials are deleted only for ``removed_ids``; identities
        written by another process are left untouched.

        Args:
            identities: Full list in display order
            removed_ids: Identities the caller removed since its last load
        """
        pass

    @abstractmethod
    async def load_active_id(self) -> Optional[IdentityId]:
        """Load the active identity pointer.

        Returns:
            The active identity ID, or None if unset
        """
        pass

    @abstractmethod
    async def save_active_id(self, identity_id: Optional[IdentityId]) -> None:
        """Store the active identity pointer.

        Args:
            identity_id: Active identity ID, or None to clear it
        """
        pass

    @abstractmethod
    async def load_client_id(self) -> Optional[str]:
        """Load the OAuth client ID used for the device flow."""
        pass

    @abstractmethod
    async def save_client_id(self, client_id: Optional[str]) -> None:
        """Store the OAuth client ID used for the device flow."""
        pass
