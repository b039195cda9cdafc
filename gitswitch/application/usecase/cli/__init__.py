"""GitHub CLI use cases."""

from .install_cli import CLIStatusUseCase, InstallCLIUseCase

__all__ = ["CLIStatusUseCase", "InstallCLIUseCase"]
