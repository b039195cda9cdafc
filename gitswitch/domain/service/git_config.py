"""Global git configuration port."""

from gitswitch.domain.value import ObservedConfig

from .base import Service


class GitConfigClient(Service):
    """Reads and writes the global user.name and user.email settings."""

    async def set_global_identity(self, name: str, email: str) -> None:
        """Write the global author name and email.

        Args:
            name: Value for user.name
            email: Value for user.email

        Raises:
            CommandFailedError: If either write fails
        """
        raise NotImplementedError

    async def get_global_identity(self) -> ObservedConfig:
        """Read the global author name and email.

        Never raises. A field that cannot be read comes back as None.
        """
        raise NotImplementedError
