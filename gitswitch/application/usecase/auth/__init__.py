"""Authentication use cases."""

from .device_login import (
    DeviceLoginUseCase,
    SetClientIdRequest,
    SetClientIdUseCase,
    effective_client_id,
)

__all__ = [
    "DeviceLoginUseCase",
    "SetClientIdRequest",
    "SetClientIdUseCase",
    "effective_client_id",
]
