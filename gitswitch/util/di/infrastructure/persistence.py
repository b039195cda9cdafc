"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from gitswitch.config import Settings
from gitswitch.domain.repository import SessionStateRepository
from gitswitch.domain.service import SecretStore
from gitswitch.persistence.database import (
    create_engine,
    create_session_factory,
    create_tables,
)
from gitswitch.persistence.repository import SqlSessionStateRepository
from gitswitch.util.di.base import ProviderBase
from gitswitch.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using SQLite."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide database engine with tables created."""
        engine = create_engine(settings)
        # Instrument SQLAlchemy for observability
        instrument_sqlalchemy(engine)
        await create_tables(engine)
        logfire.debug("State database ready", url=settings.database_url)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.APP)
    def get_session_state_repository(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        secret_store: SecretStore,
        settings: Settings,
    ) -> SessionStateRepository:
        """Provide session state repository."""
        return SqlSessionStateRepository(
            session_factory=session_factory,
            secret_store=secret_store,
            secret_service=settings.secrets.service_name,
        )
