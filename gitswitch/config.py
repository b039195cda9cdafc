"""Application configuration."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    """Local state database configuration."""

    # Empty means "derive from data_dir" (set by Settings validator)
    url: str = ""


class GitHubSettings(BaseModel):
    """GitHub hosting provider configuration."""

    hostname: str = "github.com"

    # OAuth app client ID used for the device authorization flow
    # Can also be stored at runtime with `gitswitch set-client-id`
    client_id: str = ""
    scope: str = "repo user"

    device_code_url: str = "https://github.com/login/device/code"
    access_token_url: str = "https://github.com/login/oauth/access_token"

    # Seconds added to the poll interval when the server answers "slow_down"
    slow_down_increment: float = 5.0

    request_timeout: float = 30.0

    @computed_field
    @property
    def api_url(self) -> str:
        """REST API base URL for the configured host.

        github.com -> https://api.github.com
        """
        return f"https://api.{self.hostname}"


class SecretSettings(BaseModel):
    """Secure credential storage configuration."""

    # Keyring service holding the credential of each managed identity
    service_name: str = "gitswitch"

    # Keys tried (in order) when recovering a credential for an imported identity
    recovery_keys: list[tuple[str, str]] = [
        ("github.com", "git"),
        ("https://github.com", "git"),
    ]

    # Prefix that keeps network-password entries apart from generic secrets
    network_service_prefix: str = "network-password:"


class ReconcileSettings(BaseModel):
    """Background reconciliation of external git config."""

    interval_seconds: float = 5.0


class CLISettings(BaseModel):
    """External executable discovery."""

    gh_paths: list[str] = [
        "/opt/homebrew/bin/gh",
        "/usr/local/bin/gh",
        "/usr/bin/gh",
        "/bin/gh",
    ]
    git_paths: list[str] = [
        "/opt/homebrew/bin/git",
        "/usr/local/bin/git",
        "/usr/bin/git",
        "/bin/git",
    ]
    brew_paths: list[str] = [
        "/opt/homebrew/bin/brew",
        "/usr/local/bin/brew",
        "/usr/bin/brew",
        "/bin/brew",
    ]


class ObservabilitySettings(BaseModel):
    """Observability configuration for Logfire."""

    # Logfire API token (optional - if not set, logs only go to console)
    # Can be set via GITSWITCH_OBSERVABILITY__LOGFIRE_TOKEN env var
    logfire_token: str | None = None

    # If None, will auto-determine: sends if token is present, otherwise console-only
    send_to_logfire: bool | None = None

    console: bool = True


class Settings(BaseSettings):
    """Application settings.

    Set environment variables to override, e.g.:

        GITSWITCH_DEBUG=true
        GITSWITCH_DATA_DIR=/tmp/gitswitch
        GITSWITCH_GITHUB__CLIENT_ID=Iv1.0123456789abcdef
        GITSWITCH_RECONCILE__INTERVAL_SECONDS=10
    """

    model_config = SettingsConfigDict(
        env_prefix="GITSWITCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",  # Allows GITSWITCH_GITHUB__HOSTNAME syntax
    )

    environment: Literal["test", "development", "production"] = "production"
    debug: bool = False

    data_dir: Path = Path.home() / ".gitswitch"

    # Nested settings
    database: DatabaseSettings = DatabaseSettings()
    github: GitHubSettings = GitHubSettings()
    secrets: SecretSettings = SecretSettings()
    reconcile: ReconcileSettings = ReconcileSettings()
    cli: CLISettings = CLISettings()
    observability: ObservabilitySettings = ObservabilitySettings()

    @model_validator(mode="after")
    def initialize_database_url(self) -> "Settings":
        """Point the database at data_dir unless a URL was given explicitly."""
        if not self.database.url:
            self.database = DatabaseSettings(
                url=f"sqlite+aiosqlite:///{self.data_dir / 'state.db'}"
            )
        return self

    @property
    def database_url(self) -> str:
        """Shortcut for database.url."""
        return self.database.url
