"""Secret store backed by the operating system keyring."""

import asyncio
from typing import Optional

import keyring
import logfire
from keyring.errors import KeyringError, PasswordDeleteError

from gitswitch.adapter.error import SecretStoreError
from gitswitch.domain.service.secret_store import SecretStore


class KeyringSecretStore(SecretStore):
    """SecretStore using the ``keyring`` library.

    Generic secrets live under (service, account). Network passwords live
    under (network_service_prefix + server, account) so the two namespaces
    never collide. keyring calls block, so they run in a worker thread.
    """

    def __init__(self, network_service_prefix: str = "network-password:") -> None:
        """Initialize keyring secret store.

        Args:
            network_service_prefix: Prefix applied to the server name of
                network password entries
        """
        self.network_service_prefix = network_service_prefix

    def _network_service(self, server: str) -> str:
        return f"{self.network_service_prefix}{server}"

    async def _set(self, service: str, account: str, value: str) -> None:
        try:
            await asyncio.to_thread(keyring.set_password, service, account, value)
        except KeyringError as e:
            logfire.error(
                "Keyring write failed", service=service, account=account, error=str(e)
            )
            raise SecretStoreError(f"Could not save credential: {e}") from e

    async def _get(self, service: str, account: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(keyring.get_password, service, account)
        except KeyringError as e:
            # Reads are best-effort; an unreadable entry counts as missing
            logfire.warn(
                "Keyring read failed", service=service, account=account, error=str(e)
            )
            return None

    async def _delete(self, service: str, account: str) -> None:
        try:
            await asyncio.to_thread(keyring.delete_password, service, account)
        except PasswordDeleteError:
            # Entry did not exist
            pass
        except KeyringError as e:
            logfire.error(
                "Keyring delete failed", service=service, account=account, error=str(e)
            )
            raise SecretStoreError(f"Could not delete credential: {e}") from e

    async def save(self, service: str, account: str, data: bytes) -> None:
        await self._set(service, account, data.decode("utf-8"))

    async def read(self, service: str, account: str) -> Optional[bytes]:
        value = await self._get(service, account)
        return value.encode("utf-8") if value is not None else None

    async def delete(self, service: str, account: str) -> None:
        await self._delete(service, account)

    async def save_network_password(
        self, server: str, account: str, password: str
    ) -> None:
        await self._set(self._network_service(server), account, password)

    async def read_network_password(self, server: str, account: str) -> Optional[str]:
        return await self._get(self._network_service(server), account)

    async def delete_network_password(self, server: str, account: str) -> None:
        await self._delete(self._network_service(server), account)


class InMemorySecretStore(SecretStore):
    """Dictionary-backed secret store for testing.

    Keeps the two namespaces in separate dictionaries.
    """

    def __init__(self) -> None:
        self.secrets: dict[tuple[str, str], bytes] = {}
        self.network_passwords: dict[tuple[str, str], str] = {}

    async def save(self, service: str, account: str, data: bytes) -> None:
        self.secrets[(service, account)] = data

    async def read(self, service: str, account: str) -> Optional[bytes]:
        return self.secrets.get((service, account))

    async def delete(self, service: str, account: str) -> None:
        self.secrets.pop((service, account), None)

    async def save_network_password(
        self, server: str, account: str, password: str
    ) -> None:
        self.network_passwords[(server, account)] = password

    async def read_network_password(self, server: str, account: str) -> Optional[str]:
        return self.network_passwords.get((server, account))

    async def delete_network_password(self, server: str, account: str) -> None:
        self.network_passwords.pop((server, account), None)
