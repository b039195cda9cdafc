"""Git binary adapter."""

from .config import MockGitConfigClient, RealGitConfigClient

__all__ = ["MockGitConfigClient", "RealGitConfigClient"]
