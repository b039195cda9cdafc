"""Secure credential storage port."""

from typing import Optional

from .base import Service


class SecretStore(Service):
    """Opaque secure key-value store.

    Two independent namespaces: generic secrets keyed by (service, account)
    holding bytes, and network passwords keyed by (server, account) holding
    strings. Saves overwrite, reads of missing entries return None and
    deletes of missing entries are no-ops.
    """

    async def save(self, service: str, account: str, data: bytes) -> None:
        """Store a generic secret, replacing any existing entry.

        Args:
            service: Service namespace
            account: Account key within the service
            data: Secret payload

        Raises:
            SecretStoreError: If the backend rejects the write
        """
        raise NotImplementedError

    async def read(self, service: str, account: str) -> Optional[bytes]:
        """Read a generic secret.

        Returns:
            The stored bytes, or None if missing
        """
        raise NotImplementedError

    async def delete(self, service: str, account: str) -> None:
        raise NotImplementedError

    async def save_network_password(
        self, server: str, account: str, password: str
    ) -> None:
        """Store a network password entry, replacing any existing entry."""
        raise NotImplementedError

    async def read_network_password(self, server: str, account: str) -> Optional[str]:
        raise NotImplementedError

    async def delete_network_password(self, server: str, account: str) -> None:
        raise NotImplementedError
