"""Secret store infrastructure providers."""

from dishka import Scope, provide

from gitswitch.adapter.keyring.store import KeyringSecretStore
from gitswitch.config import Settings
from gitswitch.domain.service import SecretStore
from gitswitch.util.di.base import ProviderBase


class SecretsProvider(ProviderBase):
    """Secret store component base."""

    __mock_component__ = "secrets"


class ProdSecretsProvider(SecretsProvider):
    """Production secret store provider using the OS keyring."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_secret_store(self, settings: Settings) -> SecretStore:
        """Provide keyring-backed secret store."""
        return KeyringSecretStore(
            network_service_prefix=settings.secrets.network_service_prefix
        )
