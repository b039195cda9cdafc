"""Operating system keyring adapter."""

from .store import InMemorySecretStore, KeyringSecretStore

__all__ = ["InMemorySecretStore", "KeyringSecretStore"]
