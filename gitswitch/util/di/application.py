"""Application layer DI providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide

from gitswitch.adapter.github.api import GitHubAPIClient
from gitswitch.application.coordinator import SessionCoordinator
from gitswitch.application.reconciler import ImportReconciler
from gitswitch.application.usecase.auth import DeviceLoginUseCase, SetClientIdUseCase
from gitswitch.application.usecase.cli import CLIStatusUseCase, InstallCLIUseCase
from gitswitch.application.usecase.identity import (
    AddIdentityUseCase,
    LoginWithCLIUseCase,
    RemoveIdentityUseCase,
    SwitchIdentityUseCase,
    UpdateIdentityUseCase,
)
from gitswitch.config import Settings
from gitswitch.domain.repository import SessionStateRepository
from gitswitch.domain.service import GitConfigClient, HostingCLIClient, SecretStore
from gitswitch.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application provider - concrete, no mocks needed."""

    @provide(scope=Scope.APP)
    async def get_coordinator(
        self,
        repository: SessionStateRepository,
        git_config: GitConfigClient,
        cli: HostingCLIClient,
        settings: Settings,
    ) -> AsyncIterator[SessionCoordinator]:
        """Provide the session coordinator, loaded from storage.

        Pending switches are awaited when the container closes.
        """
        coordinator = SessionCoordinator(
            repository=repository,
            git_config=git_config,
            cli=cli,
            hostname=settings.github.hostname,
        )
        await coordinator.load()
        yield coordinator
        await coordinator.close()

    @provide(scope=Scope.APP)
    def get_reconciler(
        self,
        coordinator: SessionCoordinator,
        git_config: GitConfigClient,
        secret_store: SecretStore,
        settings: Settings,
    ) -> ImportReconciler:
        """Provide import reconciler."""
        return ImportReconciler(
            coordinator=coordinator,
            git_config=git_config,
            secret_store=secret_store,
            recovery_keys=settings.secrets.recovery_keys,
            interval_seconds=settings.reconcile.interval_seconds,
        )

    # Identity use cases
    @provide(scope=Scope.REQUEST)
    def get_add_identity_use_case(
        self,
        coordinator: SessionCoordinator,
        api_client: GitHubAPIClient,
        settings: Settings,
    ) -> AddIdentityUseCase:
        """Provide add identity use case."""
        return AddIdentityUseCase(
            coordinator=coordinator,
            api_client=api_client,
            hostname=settings.github.hostname,
        )

    @provide(scope=Scope.REQUEST)
    def get_update_identity_use_case(
        self, coordinator: SessionCoordinator
    ) -> UpdateIdentityUseCase:
        """Provide update identity use case."""
        return UpdateIdentityUseCase(coordinator=coordinator)

    @provide(scope=Scope.REQUEST)
    def get_remove_identity_use_case(
        self, coordinator: SessionCoordinator
    ) -> RemoveIdentityUseCase:
        """Provide remove identity use case."""
        return RemoveIdentityUseCase(coordinator=coordinator)

    @provide(scope=Scope.REQUEST)
    def get_switch_identity_use_case(
        self, coordinator: SessionCoordinator
    ) -> SwitchIdentityUseCase:
        """Provide switch identity use case."""
        return SwitchIdentityUseCase(coordinator=coordinator)

    @provide(scope=Scope.REQUEST)
    def get_login_with_cli_use_case(
        self,
        coordinator: SessionCoordinator,
        cli: HostingCLIClient,
        settings: Settings,
    ) -> LoginWithCLIUseCase:
        """Provide login with CLI use case."""
        return LoginWithCLIUseCase(
            coordinator=coordinator, cli=cli, hostname=settings.github.hostname
        )

    # Auth use cases
    @provide(scope=Scope.REQUEST)
    def get_device_login_use_case(
        self, repository: SessionStateRepository, settings: Settings
    ) -> DeviceLoginUseCase:
        """Provide device login use case."""
        return DeviceLoginUseCase(repository=repository, settings=settings)

    @provide(scope=Scope.REQUEST)
    def get_set_client_id_use_case(
        self, repository: SessionStateRepository
    ) -> SetClientIdUseCase:
        """Provide set client ID use case."""
        return SetClientIdUseCase(repository=repository)

    # CLI installation use cases
    @provide(scope=Scope.REQUEST)
    def get_cli_status_use_case(self, cli: HostingCLIClient) -> CLIStatusUseCase:
        """Provide CLI status use case."""
        return CLIStatusUseCase(cli=cli)

    @provide(scope=Scope.REQUEST)
    def get_install_cli_use_case(self, cli: HostingCLIClient) -> InstallCLIUseCase:
        """Provide install CLI use case."""
        return InstallCLIUseCase(cli=cli)
