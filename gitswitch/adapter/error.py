"""Infrastructure layer errors.

Every error carries a user-facing ``message``. These are the "known" error
kinds surfaced verbatim when a switch fails.
"""


class AdapterError(Exception):
    """Base infrastructure error."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ProviderError(AdapterError):
    """External provider error."""

    pass


class CLINotInstalledError(ProviderError):
    """The hosting provider's CLI could not be found."""

    def __init__(self, message: str = "GitHub CLI (gh) is not installed"):
        super().__init__(message)


class PackageManagerNotFoundError(ProviderError):
    """The package manager needed to install the CLI is absent."""

    def __init__(
        self, message: str = "Homebrew not found - install it from https://brew.sh"
    ):
        super().__init__(message)


class InstallationFailedError(ProviderError):
    """The CLI is still missing after an install attempt."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Failed to install GitHub CLI: {detail}")


class CommandFailedError(ProviderError):
    """An external command exited non-zero.

    Attributes:
        output: Captured stderr, or stdout if stderr was empty
    """

    def __init__(self, output: str):
        self.output = output
        super().__init__(f"Command failed: {output}" if output else "Command failed")


class GitHubAPIError(ProviderError):
    """Non-success or malformed response from the GitHub REST API."""

    def __init__(self, detail: str, status_code: int | None = None):
        self.status_code = status_code
        self.detail = detail
        if status_code is not None:
            super().__init__(f"GitHub API error ({status_code}): {detail}")
        else:
            super().__init__(f"GitHub API error: {detail}")


class DeviceFlowError(ProviderError):
    """The device-code request could not be completed."""

    pass


class SecretStoreError(AdapterError):
    """The secure storage backend rejected an operation."""

    pass
