"""Global git configuration client.

Reads and writes ``user.name`` and ``user.email`` in the global git config
by running the git binary.
"""

import asyncio
from collections.abc import Sequence
from typing import Optional

import logfire

from gitswitch.adapter.error import CommandFailedError
from gitswitch.adapter.process import find_executable, run_checked, run_command
from gitswitch.domain.service.git_config import GitConfigClient
from gitswitch.domain.value import ObservedConfig


class RealGitConfigClient(GitConfigClient):
    """Git config client that shells out to ``git config --global``."""

    def __init__(self, search_paths: Sequence[str] = ()) -> None:
        """Initialize git config client.

        Args:
            search_paths: Install locations checked before PATH
        """
        self.search_paths = list(search_paths)

    def _git(self) -> str:
        path = find_executable("git", self.search_paths)
        if path is None:
            raise CommandFailedError("git executable not found")
        return path

    async def set_global_identity(self, name: str, email: str) -> None:
        """Write user.name then user.email.

        Raises:
            CommandFailedError: If git is missing or either write fails
        """
        git = self._git()
        await run_checked(git, ["config", "--global", "user.name", name])
        await run_checked(git, ["config", "--global", "user.email", email])
        logfire.info("Global git identity written", name=name, email=email)

    async def _read(self, key: str) -> Optional[str]:
        try:
            result = await run_command(self._git(), ["config", "--global", key])
        except (OSError, CommandFailedError) as e:
            logfire.debug("Git config read failed", key=key, error=str(e))
            return None
        if not result.ok:
            # git exits 1 when the key is unset
            return None
        value = result.stdout.strip()
        return value or None

    async def get_global_identity(self) -> ObservedConfig:
        name, email = await asyncio.gather(
            self._read("user.name"), self._read("user.email")
        )
        return ObservedConfig(name=name, email=email)


class MockGitConfigClient(GitConfigClient):
    """In-memory git config for testing.

    Records every call in ``journal`` as ``("git.<operation>", ...)`` tuples.
    A list shared with other mocks gives a single ordered call log.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        journal: Optional[list[tuple]] = None,
    ) -> None:
        self.name = name
        self.email = email
        self.journal = journal if journal is not None else []
        self.write_error: Optional[Exception] = None
        self.read_error: Optional[Exception] = None

    async def set_global_identity(self, name: str, email: str) -> None:
        self.journal.append(("git.set_global_identity", name, email))
        if self.write_error is not None:
            raise self.write_error
        self.name = name
        self.email = email

    async def get_global_identity(self) -> ObservedConfig:
        self.journal.append(("git.get_global_identity",))
        if self.read_error is not None:
            return ObservedConfig()
        return ObservedConfig(name=self.name or None, email=self.email or None)
