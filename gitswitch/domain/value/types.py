"""Domain value objects for gitswitch.

Value objects are immutable and defined by their values, not identity.
"""

from enum import Enum

from pydantic import Field, SecretStr

from gitswitch.domain.value.common import ValueObject


class CLIInstallStatus(str, Enum):
    """Installation state of the hosting provider's command-line helper."""

    INSTALLED = "installed"
    NOT_INSTALLED = "not_installed"
    PACKAGE_MANAGER_MISSING = "package_manager_missing"


class DeviceFlowPhase(str, Enum):
    """Phase of a device authorization attempt."""

    IDLE = "idle"
    LOADING = "loading"
    WAITING_FOR_AUTH = "waiting_for_auth"
    AUTHENTICATED = "authenticated"
    ERROR = "error"


class ReconcileOutcome(str, Enum):
    """What a reconcile pass did with the observed git config."""

    NO_EMAIL = "no_email"
    DEFERRED = "deferred"  # A switch was in flight
    ALREADY_ACTIVE = "already_active"
    ADOPTED = "adopted"
    IMPORTED = "imported"


class RemoteUser(ValueObject):
    """Account information returned by the hosting provider."""

    username: str
    avatar_url: str | None = None


class ObservedConfig(ValueObject):
    """Global git identity as currently written in the user's git config."""

    name: str | None = None
    email: str | None = None


class CLIStatusReport(ValueObject):
    """Installation status plus what the user can do about it."""

    status: CLIInstallStatus

    @property
    def message(self) -> str:
        """Human readable status line."""
        if self.status == CLIInstallStatus.INSTALLED:
            return "GitHub CLI is installed and ready"
        if self.status == CLIInstallStatus.NOT_INSTALLED:
            return "GitHub CLI is not installed"
        return "Homebrew not found - required to install GitHub CLI"

    @property
    def can_install(self) -> bool:
        """Only a missing CLI with a working package manager can be installed."""
        return self.status == CLIInstallStatus.NOT_INSTALLED


class DeviceCodeGrant(ValueObject):
    """Codes issued by the device-code endpoint for one authorization attempt.

    Lives only in memory for the duration of the attempt.
    """

    device_code: SecretStr
    user_code: str
    verification_uri: str
    expires_in: int
    interval: float = Field(gt=0)


class DeviceFlowState(ValueObject):
    """Published state of the device authorization state machine.

    `credential` is only set in the AUTHENTICATED phase, `message` only in
    the ERROR phase.
    """

    phase: DeviceFlowPhase = DeviceFlowPhase.IDLE
    credential: SecretStr | None = None
    message: str | None = None

    @classmethod
    def idle(cls) -> "DeviceFlowState":
        return cls(phase=DeviceFlowPhase.IDLE)

    @classmethod
    def loading(cls) -> "DeviceFlowState":
        return cls(phase=DeviceFlowPhase.LOADING)

    @classmethod
    def waiting_for_auth(cls) -> "DeviceFlowState":
        return cls(phase=DeviceFlowPhase.WAITING_FOR_AUTH)

    @classmethod
    def authenticated(cls, credential: str) -> "DeviceFlowState":
        return cls(phase=DeviceFlowPhase.AUTHENTICATED, credential=SecretStr(credential))

    @classmethod
    def error(cls, message: str) -> "DeviceFlowState":
        return cls(phase=DeviceFlowPhase.ERROR, message=message)

    @property
    def is_terminal(self) -> bool:
        return self.phase in (DeviceFlowPhase.AUTHENTICATED, DeviceFlowPhase.ERROR)

    @property
    def token(self) -> str | None:
        """The issued bearer token, if authenticated."""
        return self.credential.get_secret_value() if self.credential else None
