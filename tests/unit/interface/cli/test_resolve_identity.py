"""Unit tests for identity lookup from the command line."""

import pytest
import pytest_asyncio

from gitswitch.application.coordinator import SessionCoordinator
from gitswitch.domain.error import NotFoundError, ValidationError
from gitswitch.interface.cli.app import resolve_identity
from tests.factories import make_identity
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestResolveIdentity:
    """Tests for resolve_identity."""

    @pytest_asyncio.fixture
    async def coordinator(self, unit_env):
        coordinator = await unit_env.get(SessionCoordinator)
        await coordinator.add_identity(make_identity("Alice", "alice@example.com"))
        await coordinator.add_identity(make_identity("Work", "alice@work.example.com"))
        await coordinator.add_identity(make_identity("Work", "ops@work.example.com"))
        return coordinator

    @pytest.mark.asyncio
    async def test_by_full_id(self, coordinator):
        target = coordinator.identities[1]

        assert resolve_identity(coordinator, str(target.id)) == target

    @pytest.mark.asyncio
    async def test_by_id_prefix(self, coordinator):
        target = coordinator.identities[0]

        assert resolve_identity(coordinator, str(target.id)[:8]) == target

    @pytest.mark.asyncio
    async def test_by_email(self, coordinator):
        assert resolve_identity(coordinator, "ops@work.example.com").email == "ops@work.example.com"

    @pytest.mark.asyncio
    async def test_by_name(self, coordinator):
        assert resolve_identity(coordinator, "Alice").email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_ambiguous_name(self, coordinator):
        with pytest.raises(ValidationError):
            resolve_identity(coordinator, "Work")

    @pytest.mark.asyncio
    async def test_no_match(self, coordinator):
        with pytest.raises(NotFoundError):
            resolve_identity(coordinator, "nobody")
