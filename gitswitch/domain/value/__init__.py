"""Domain value objects for gitswitch."""

from gitswitch.domain.value.identifiers import IdentityId, new_identity_id
from gitswitch.domain.value.types import (
    CLIInstallStatus,
    CLIStatusReport,
    DeviceCodeGrant,
    DeviceFlowPhase,
    DeviceFlowState,
    ObservedConfig,
    ReconcileOutcome,
    RemoteUser,
)

__all__ = [
    # Identifiers
    "IdentityId",
    "new_identity_id",
    # Types
    "CLIInstallStatus",
    "CLIStatusReport",
    "DeviceCodeGrant",
    "DeviceFlowPhase",
    "DeviceFlowState",
    "ObservedConfig",
    "ReconcileOutcome",
    "RemoteUser",
]
