"""Mock providers for testing."""

from .container import build_test_container
from .git import MockGitProvider
from .github import MockGitHubProvider
from .journal import CallJournal, JournalProvider
from .persistence import MockPersistenceProvider
from .secrets import MockSecretsProvider

__all__ = [
    "CallJournal",
    "JournalProvider",
    "MockGitHubProvider",
    "MockGitProvider",
    "MockPersistenceProvider",
    "MockSecretsProvider",
    "build_test_container",
]
