"""Unit tests for device login and CLI installation use cases."""

import httpx
import pytest

from gitswitch.adapter.error import PackageManagerNotFoundError
from gitswitch.application.usecase.auth import (
    DeviceLoginUseCase,
    SetClientIdRequest,
    SetClientIdUseCase,
    effective_client_id,
)
from gitswitch.application.usecase.base import BaseUseCase
from gitswitch.application.usecase.cli import CLIStatusUseCase, InstallCLIUseCase
from gitswitch.config import Settings
from gitswitch.domain.repository import SessionStateRepository
from gitswitch.domain.service import HostingCLIClient
from gitswitch.domain.value import CLIInstallStatus, DeviceFlowPhase
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestDeviceLoginUseCase:
    """Tests for DeviceLoginUseCase."""

    @pytest.mark.asyncio
    async def test_without_client_id(self, unit_env):
        use_case = await unit_env.get(DeviceLoginUseCase)

        authenticator = await use_case.execute()

        assert authenticator.state.phase == DeviceFlowPhase.ERROR
        assert authenticator.state.message == "Client ID is missing"

    @pytest.mark.asyncio
    async def test_stored_client_id_used(self, unit_env):
        # Arrange
        repository = await unit_env.get(SessionStateRepository)
        settings = await unit_env.get(Settings)
        set_client_id = await unit_env.get(SetClientIdUseCase)
        await set_client_id.execute(SetClientIdRequest(client_id="  Iv1.stored  "))
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "device_code": "dc",
                    "user_code": "ABCD-EFGH",
                    "verification_uri": "https://github.com/login/device",
                    "expires_in": 900,
                    "interval": 60,
                },
            )

        use_case = DeviceLoginUseCase(
            repository=repository, settings=settings, transport=httpx.MockTransport(handler)
        )

        # Act
        authenticator = await use_case.execute()
        authenticator.stop()
        await authenticator.wait()

        # Assert
        assert authenticator.client_id == "Iv1.stored"
        assert authenticator.user_code == "ABCD-EFGH"
        assert len(requests) == 1


class TestSetClientIdUseCase:
    """Tests for SetClientIdUseCase."""

    @pytest.mark.asyncio
    async def test_stored_value_overrides_settings(self, unit_env):
        repository = await unit_env.get(SessionStateRepository)
        settings = await unit_env.get(Settings)
        use_case = await unit_env.get(SetClientIdUseCase)
        settings.github.client_id = "Iv1.configured"

        assert await effective_client_id(repository, settings) == "Iv1.configured"

        await use_case.execute(SetClientIdRequest(client_id="Iv1.stored"))
        assert await effective_client_id(repository, settings) == "Iv1.stored"

        await use_case.execute(SetClientIdRequest(client_id=""))
        assert await effective_client_id(repository, settings) == "Iv1.configured"


class TestCLIInstallUseCases:
    """Tests for CLI status and installation."""

    @pytest.mark.asyncio
    async def test_status(self, unit_env):
        cli = await unit_env.get(HostingCLIClient)
        use_case = await unit_env.get(CLIStatusUseCase)
        cli.installed = False

        report = await use_case.execute()

        assert report.status == CLIInstallStatus.NOT_INSTALLED
        assert report.can_install

    @pytest.mark.asyncio
    async def test_install(self, unit_env):
        cli = await unit_env.get(HostingCLIClient)
        use_case = await unit_env.get(InstallCLIUseCase)
        cli.installed = False

        report = await use_case.execute()

        assert report.status == CLIInstallStatus.INSTALLED

    @pytest.mark.asyncio
    async def test_install_without_homebrew(self, unit_env):
        cli = await unit_env.get(HostingCLIClient)
        use_case = await unit_env.get(InstallCLIUseCase)
        cli.installed = False
        cli.package_manager = False

        with pytest.raises(PackageManagerNotFoundError):
            await use_case.execute()


class TestUseCaseBase:
    """Every auth and CLI use case shares the BaseUseCase interface."""

    @pytest.mark.parametrize(
        "use_case_class",
        [DeviceLoginUseCase, SetClientIdUseCase, CLIStatusUseCase, InstallCLIUseCase],
    )
    def test_is_base_use_case(self, use_case_class):
        assert issubclass(use_case_class, BaseUseCase)
