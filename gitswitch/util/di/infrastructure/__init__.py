"""Infrastructure providers."""

# Import bases
from .git import GitProvider
from .github import GitHubProvider
from .persistence import PersistenceProvider
from .secrets import SecretsProvider

# Import implementations (needed for __subclasses__())
from .git import ProdGitProvider  # noqa: F401
from .github import ProdGitHubProvider  # noqa: F401
from .persistence import ProdPersistenceProvider  # noqa: F401
from .secrets import ProdSecretsProvider  # noqa: F401

__all__ = [
    "GitHubProvider",
    "GitProvider",
    "PersistenceProvider",
    "ProdGitHubProvider",
    "ProdGitProvider",
    "ProdPersistenceProvider",
    "ProdSecretsProvider",
    "SecretsProvider",
]
