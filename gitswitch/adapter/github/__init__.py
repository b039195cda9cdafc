"""GitHub adapters: gh CLI, REST API and device authorization flow."""

from .api import GitHubAPIClient
from .cli import GitHubCLIClient, MockGitHubCLIClient, RealGitHubCLIClient
from .device_flow import DeviceFlowAuthenticator

__all__ = [
    "DeviceFlowAuthenticator",
    "GitHubAPIClient",
    "GitHubCLIClient",
    "MockGitHubCLIClient",
    "RealGitHubCLIClient",
]
