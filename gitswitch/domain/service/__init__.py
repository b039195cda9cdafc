"""Domain services and ports."""

from .base import Service
from .git_config import GitConfigClient
from .hosting_cli import HostingCLIClient, OutputSink
from .secret_store import SecretStore

__all__ = [
    "GitConfigClient",
    "HostingCLIClient",
    "OutputSink",
    "SecretStore",
    "Service",
]
