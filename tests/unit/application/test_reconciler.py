"""Unit tests for the import reconciler."""

import asyncio

import pytest

from gitswitch.application.coordinator import SessionCoordinator
from gitswitch.application.reconciler import ImportReconciler
from gitswitch.domain.repository import SessionStateRepository
from gitswitch.domain.service import GitConfigClient, HostingCLIClient, SecretStore
from gitswitch.domain.value import ReconcileOutcome
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestReconcileOnce:
    """Tests for a single reconcile pass."""

    @pytest.mark.asyncio
    async def test_known_email_becomes_active(self, unit_env, alice, bob):
        # Arrange
        coordinator = await unit_env.get(SessionCoordinator)
        git = await unit_env.get(GitConfigClient)
        reconciler = await unit_env.get(ImportReconciler)
        await coordinator.add_identity(alice)
        await coordinator.add_identity(bob)
        git.name, git.email = "Bob B.", "bob@example.com"

        # Act
        outcome = await reconciler.reconcile_once()

        # Assert
        assert outcome == ReconcileOutcome.ADOPTED
        assert coordinator.active_id == bob.id
        assert len(coordinator.identities) == 2

    @pytest.mark.asyncio
    async def test_second_pass_is_a_no_op(self, unit_env, alice):
        coordinator = await unit_env.get(SessionCoordinator)
        git = await unit_env.get(GitConfigClient)
        reconciler = await unit_env.get(ImportReconciler)
        await coordinator.add_identity(alice)
        git.name, git.email = "Alice", "alice@example.com"

        await reconciler.reconcile_once()
        outcome = await reconciler.reconcile_once()

        assert outcome == ReconcileOutcome.ALREADY_ACTIVE
        assert len(coordinator.identities) == 1

    @pytest.mark.asyncio
    async def test_unknown_email_imported(self, unit_env, alice):
        # Arrange
        coordinator = await unit_env.get(SessionCoordinator)
        git = await unit_env.get(GitConfigClient)
        reconciler = await unit_env.get(ImportReconciler)
        await coordinator.add_identity(alice)
        git.name, git.email = "Jane Doe", "jane@example.com"

        # Act
        outcome = await reconciler.reconcile_once()

        # Assert
        assert outcome == ReconcileOutcome.IMPORTED
        jane = coordinator.find_by_email("jane@example.com")
        assert jane.display_name == "Jane Doe"
        assert jane.token == ""
        assert coordinator.active_id == jane.id
        assert (coordinator.observed_name, coordinator.observed_email) == (
            "Jane Doe",
            "jane@example.com",
        )

    @pytest.mark.asyncio
    async def test_missing_email_does_nothing(self, unit_env, alice):
        coordinator = await unit_env.get(SessionCoordinator)
        git = await unit_env.get(GitConfigClient)
        reconciler = await unit_env.get(ImportReconciler)
        await coordinator.add_identity(alice)
        git.name, git.email = "Someone", None

        outcome = await reconciler.reconcile_once()

        assert outcome == ReconcileOutcome.NO_EMAIL
        assert coordinator.identities == [alice]
        assert coordinator.active_id is None
        assert coordinator.observed_name == "Someone"

    @pytest.mark.asyncio
    async def test_unreadable_config_does_nothing(self, unit_env):
        coordinator = await unit_env.get(SessionCoordinator)
        git = await unit_env.get(GitConfigClient)
        reconciler = await unit_env.get(ImportReconciler)
        git.email = "jane@example.com"
        git.read_error = OSError("git missing")

        outcome = await reconciler.reconcile_once()

        assert outcome == ReconcileOutcome.NO_EMAIL
        assert coordinator.identities == []

    @pytest.mark.asyncio
    async def test_deferred_while_switching(self, unit_env, alice):
        coordinator = await unit_env.get(SessionCoordinator)
        git = await unit_env.get(GitConfigClient)
        reconciler = await unit_env.get(ImportReconciler)
        await coordinator.add_identity(alice)
        git.name, git.email = "Jane", "jane@example.com"
        task = await coordinator.switch_to(alice)

        outcome = await reconciler.reconcile_once()
        await task

        assert outcome == ReconcileOutcome.DEFERRED
        assert coordinator.find_by_email("jane@example.com") is None


class TestCredentialRecovery:
    """Tests for recovering a credential for imported identities."""

    @pytest.mark.asyncio
    async def test_nothing_stored(self, unit_env):
        reconciler = await unit_env.get(ImportReconciler)

        assert await reconciler.recover_credential() == ""

    @pytest.mark.asyncio
    async def test_generic_secret_preferred(self, unit_env):
        store = await unit_env.get(SecretStore)
        reconciler = await unit_env.get(ImportReconciler)
        await store.save("github.com", "git", b"gho_generic")
        await store.save_network_password("github.com", "git", "gho_network")

        assert await reconciler.recover_credential() == "gho_generic"

    @pytest.mark.asyncio
    async def test_network_password_used(self, unit_env):
        store = await unit_env.get(SecretStore)
        reconciler = await unit_env.get(ImportReconciler)
        await store.save_network_password("github.com", "git", "gho_network")

        assert await reconciler.recover_credential() == "gho_network"

    @pytest.mark.asyncio
    async def test_keys_tried_in_order(self, unit_env):
        store = await unit_env.get(SecretStore)
        reconciler = await unit_env.get(ImportReconciler)
        await store.save("https://github.com", "git", b"gho_second")

        assert await reconciler.recover_credential() == "gho_second"

        await store.save_network_password("github.com", "git", "gho_first")

        assert await reconciler.recover_credential() == "gho_first"

    @pytest.mark.asyncio
    async def test_imported_identity_gets_recovered_credential(self, unit_env):
        # Arrange
        coordinator = await unit_env.get(SessionCoordinator)
        git = await unit_env.get(GitConfigClient)
        store = await unit_env.get(SecretStore)
        reconciler = await unit_env.get(ImportReconciler)
        await store.save("github.com", "git", b"gho_recovered")
        git.name, git.email = "Jane", "jane@example.com"

        # Act
        await reconciler.reconcile_once()

        # Assert
        assert coordinator.find_by_email("jane@example.com").token == "gho_recovered"


class TestReconcilerLoop:
    """Tests for the periodic loop."""

    @pytest.mark.asyncio
    async def test_first_pass_runs_immediately(self, unit_env):
        coordinator = await unit_env.get(SessionCoordinator)
        git = await unit_env.get(GitConfigClient)
        reconciler = await unit_env.get(ImportReconciler)
        git.name, git.email = "Jane", "jane@example.com"

        reconciler.start()
        await asyncio.sleep(0.05)
        await reconciler.stop()

        assert coordinator.find_by_email("jane@example.com") is not None

    @pytest.mark.asyncio
    async def test_stop_before_interval_elapses(self, unit_env):
        reconciler = await unit_env.get(ImportReconciler)
        reconciler.interval_seconds = 3600

        task = reconciler.start()
        await asyncio.wait_for(reconciler.stop(), timeout=1)

        assert task.done()


class TestSharedStorage:
    """The watcher shares storage with short-lived command processes."""

    async def _second_process(self, unit_env) -> SessionCoordinator:
        other = SessionCoordinator(
            repository=await unit_env.get(SessionStateRepository),
            git_config=await unit_env.get(GitConfigClient),
            cli=await unit_env.get(HostingCLIClient),
        )
        await other.load()
        return other

    @pytest.mark.asyncio
    async def test_identity_added_elsewhere_is_kept(self, unit_env, bob):
        # Arrange
        git = await unit_env.get(GitConfigClient)
        reconciler = await unit_env.get(ImportReconciler)
        repository = await unit_env.get(SessionStateRepository)
        git.name, git.email = "Alice", "alice@example.com"
        assert await reconciler.reconcile_once() == ReconcileOutcome.IMPORTED

        other = await self._second_process(unit_env)
        await other.add_identity(bob)
        await (await other.switch_to(bob))

        # Act
        outcome = await reconciler.reconcile_once()

        # Assert
        assert outcome == ReconcileOutcome.ALREADY_ACTIVE
        stored = await repository.load_identities()
        assert [i.email for i in stored] == ["alice@example.com", "bob@example.com"]
        assert stored[1].id == bob.id
        assert stored[1].token == "ghp_bob000000000000"
        assert await repository.load_active_id() == bob.id

    @pytest.mark.asyncio
    async def test_import_does_not_drop_other_credentials(self, unit_env, bob):
        # Arrange
        coordinator = await unit_env.get(SessionCoordinator)
        git = await unit_env.get(GitConfigClient)
        reconciler = await unit_env.get(ImportReconciler)
        secrets = await unit_env.get(SecretStore)
        other = await self._second_process(unit_env)
        await other.add_identity(bob)
        git.name, git.email = "Jane", "jane@example.com"

        # Act
        outcome = await reconciler.reconcile_once()

        # Assert
        assert outcome == ReconcileOutcome.IMPORTED
        assert [i.email for i in coordinator.identities] == [
            "bob@example.com",
            "jane@example.com",
        ]
        assert await secrets.read("gitswitch", str(bob.id)) == b"ghp_bob000000000000"
