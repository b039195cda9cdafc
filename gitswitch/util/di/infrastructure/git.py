"""Git infrastructure providers."""

from dishka import Scope, provide

from gitswitch.adapter.git.config import RealGitConfigClient
from gitswitch.config import Settings
from gitswitch.domain.service import GitConfigClient
from gitswitch.util.di.base import ProviderBase


class GitProvider(ProviderBase):
    """Git component base."""

    __mock_component__ = "git"


class ProdGitProvider(GitProvider):
    """Production git provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_git_config_client(self, settings: Settings) -> GitConfigClient:
        """Provide git config client."""
        return RealGitConfigClient(search_paths=settings.cli.git_paths)
