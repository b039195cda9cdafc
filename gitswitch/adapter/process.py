"""Subprocess helpers shared by the git and GitHub CLI adapters.

Commands are run with asyncio subprocesses so the event loop that owns
session state is never blocked by an external tool.
"""

import asyncio
import codecs
import os
import shutil
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Optional

from gitswitch.adapter.error import CommandFailedError
from gitswitch.util.logging import get_logger

logger = get_logger(__name__)

# Size of each read while streaming output to a sink
STREAM_CHUNK_SIZE = 1024


@dataclass(frozen=True)
class CommandResult:
    """Exit status and decoded output of a finished command."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def diagnostic(self) -> str:
        """Text describing a failure: stderr, or stdout if stderr is empty."""
        error = self.stderr.strip()
        return error if error else self.stdout.strip()


def find_executable(name: str, search_paths: Sequence[str]) -> Optional[str]:
    """Locate an executable.

    Checks the configured install locations first, then falls back to PATH.

    Args:
        name: Executable name, e.g. "gh"
        search_paths: Absolute paths to try before PATH lookup

    Returns:
        Absolute path to the executable, or None if not found
    """
    for path in search_paths:
        if os.path.isfile(path) and os.access(path, os.X_OK):
            return path
    return shutil.which(name)


async def run_command(
    executable: str,
    args: Sequence[str],
    stdin_data: Optional[str] = None,
) -> CommandResult:
    """Run a command to completion and capture its output.

    Args:
        executable: Absolute path to the program
        args: Arguments (without the program itself)
        stdin_data: Text written to the process's standard input, if any.
            Secrets must be passed this way, never as arguments.

    Returns:
        The command result, successful or not
    """
    # Log arguments only; stdin may carry a credential
    logger.debug("Running %s %s", os.path.basename(executable), " ".join(args))

    process = await asyncio.create_subprocess_exec(
        executable,
        *args,
        stdin=asyncio.subprocess.PIPE if stdin_data is not None else asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate(
        input=stdin_data.encode("utf-8") if stdin_data is not None else None
    )

    return CommandResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace") if stdout else "",
        stderr=stderr.decode("utf-8", errors="replace") if stderr else "",
    )


async def run_checked(
    executable: str,
    args: Sequence[str],
    stdin_data: Optional[str] = None,
) -> str:
    """Run a command and return its stdout.

    Raises:
        CommandFailedError: If the command exits non-zero
    """
    result = await run_command(executable, args, stdin_data=stdin_data)
    if not result.ok:
        raise CommandFailedError(result.diagnostic)
    return result.stdout


async def stream_command(
    executable: str,
    args: Sequence[str],
    on_output: Callable[[str], None],
) -> CommandResult:
    """Run a long-lived command, delivering output as it arrives.

    stderr is merged into stdout so prompts written to either stream reach
    the sink in order. Returns once the process exits.

    Args:
        executable: Absolute path to the program
        args: Arguments (without the program itself)
        on_output: Called with each decoded chunk of output

    Returns:
        Result whose stdout holds everything that was streamed
    """
    logger.debug("Streaming %s %s", os.path.basename(executable), " ".join(args))

    process = await asyncio.create_subprocess_exec(
        executable,
        *args,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )

    # Multibyte characters may be split across reads
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    captured: list[str] = []
    while True:
        chunk = await process.stdout.read(STREAM_CHUNK_SIZE)
        text = decoder.decode(chunk, final=not chunk)
        if text:
            captured.append(text)
            on_output(text)
        if not chunk:
            break

    returncode = await process.wait()
    return CommandResult(returncode=returncode, stdout="".join(captured), stderr="")
