"""GitHub infrastructure providers."""

from dishka import Scope, provide

from gitswitch.adapter.github.api import GitHubAPIClient
from gitswitch.adapter.github.cli import RealGitHubCLIClient
from gitswitch.config import Settings
from gitswitch.domain.service import HostingCLIClient
from gitswitch.util.di.base import ProviderBase


class GitHubProvider(ProviderBase):
    """GitHub component base."""

    __mock_component__ = "github"


class ProdGitHubProvider(GitHubProvider):
    """Production GitHub provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_api_client(self, settings: Settings) -> GitHubAPIClient:
        """Provide GitHub REST API client."""
        return GitHubAPIClient(
            api_url=settings.github.api_url,
            timeout=settings.github.request_timeout,
        )

    @provide(scope=Scope.APP)
    def get_cli_client(
        self, settings: Settings, api_client: GitHubAPIClient
    ) -> HostingCLIClient:
        """Provide GitHub CLI client.

        Returns:
            gh client; executables are located lazily on each call
        """
        return RealGitHubCLIClient(
            api_client=api_client,
            gh_paths=settings.cli.gh_paths,
            brew_paths=settings.cli.brew_paths,
        )
