"""Session state repositories.

Identity records and the active pointer are stored as preference values.
Credentials are written to the secret store under the identity's ID and
joined back in on load.
"""

from abc import abstractmethod
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Optional

import logfire
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gitswitch.adapter.error import SecretStoreError
from gitswitch.domain.model import Identity
from gitswitch.domain.repository import SessionStateRepository
from gitswitch.domain.service import SecretStore
from gitswitch.domain.value import IdentityId
from gitswitch.persistence.mappers import (
    identities_to_json,
    json_to_identity_dicts,
    parse_identity_id,
    validate_identity,
)
from gitswitch.persistence.tables import (
    ACTIVE_IDENTITY_KEY,
    CLIENT_ID_KEY,
    IDENTITIES_KEY,
    preferences_table,
)


class PreferenceSessionStateRepository(SessionStateRepository):
    """SessionStateRepository over a string key/value store.

    Subclasses provide ``read_value`` and ``write_value``.
    """

    def __init__(self, secret_store: SecretStore, secret_service: str) -> None:
        """Initialize repository.

        Args:
            secret_store: Where credentials are kept
            secret_service: Secret store service name for credentials
        """
        self.secret_store = secret_store
        self.secret_service = secret_service

    @abstractmethod
    async def read_value(self, key: str) -> Optional[str]:
        """Read a raw preference value, None if unset."""
        pass

    @abstractmethod
    async def write_value(self, key: str, value: Optional[str]) -> None:
        """Write a raw preference value, None to unset."""
        pass

    async def _load_credential(self, identity_id: str) -> str:
        data = await self.secret_store.read(self.secret_service, identity_id)
        return data.decode("utf-8") if data else ""

    async def load_identities(self) -> list[Identity]:
        identities = []
        for data in json_to_identity_dicts(await self.read_value(IDENTITIES_KEY)):
            credential = await self._load_credential(str(data.get("id", "")))
            identity = validate_identity(data, credential)
            if identity is not None:
                identities.append(identity)
        return identities

    async def _store_credential(self, identity: Identity) -> None:
        try:
            if identity.has_credential:
                await self.secret_store.save(
                    self.secret_service, str(identity.id), identity.token.encode("utf-8")
                )
            else:
                await self.secret_store.delete(self.secret_service, str(identity.id))
        except SecretStoreError as e:
            logfire.warn(
                "Failed to store credential",
                identity_id=str(identity.id),
                error=e.message,
            )

    async def save_identities(
        self,
        identities: list[Identity],
        removed_ids: Iterable[IdentityId] = (),
    ) -> None:
        # The list is written before any credential; credential failures are only logged
        await self.write_value(IDENTITIES_KEY, identities_to_json(identities))

        for identity in identities:
            await self._store_credential(identity)

        for removed_id in removed_ids:
            try:
                await self.secret_store.delete(self.secret_service, str(removed_id))
            except SecretStoreError as e:
                logfire.warn(
                    "Failed to delete credential",
                    identity_id=str(removed_id),
                    error=e.message,
                )

        logfire.debug("Identities saved", count=len(identities))

    async def load_active_id(self) -> Optional[IdentityId]:
        return parse_identity_id(await self.read_value(ACTIVE_IDENTITY_KEY))

    async def save_active_id(self, identity_id: Optional[IdentityId]) -> None:
        await self.write_value(
            ACTIVE_IDENTITY_KEY, str(identity_id) if identity_id is not None else None
        )

    async def load_client_id(self) -> Optional[str]:
        return await self.read_value(CLIENT_ID_KEY) or None

    async def save_client_id(self, client_id: Optional[str]) -> None:
        await self.write_value(CLIENT_ID_KEY, client_id or None)


class SqlSessionStateRepository(PreferenceSessionStateRepository):
    """SQL implementation of SessionStateRepository.

    Opens a short-lived session per operation; the repository itself lives
    as long as the application.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        secret_store: SecretStore,
        secret_service: str,
    ) -> None:
        """Initialize repository with a session factory.

        Args:
            session_factory: SQLAlchemy async session factory
            secret_store: Where credentials are kept
            secret_service: Secret store service name for credentials
        """
        super().__init__(secret_store, secret_service)
        self.session_factory = session_factory

    async def read_value(self, key: str) -> Optional[str]:
        async with self.session_factory() as session:
            stmt = select(preferences_table.c.value).where(preferences_table.c.key == key)
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def write_value(self, key: str, value: Optional[str]) -> None:
        async with self.session_factory() as session:
            existing = await session.execute(
                select(preferences_table.c.key).where(preferences_table.c.key == key)
            )
            now = datetime.now(timezone.utc)

            if existing.first() is not None:
                # Update
                stmt = (
                    preferences_table.update()
                    .where(preferences_table.c.key == key)
                    .values(value=value, updated_at=now)
                )
            else:
                # Insert
                stmt = preferences_table.insert().values(
                    key=key, value=value, updated_at=now
                )
            await session.execute(stmt)
            await session.commit()
