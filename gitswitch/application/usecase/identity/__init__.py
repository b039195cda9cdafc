"""Identity use cases."""

from .add_identity import AddIdentityRequest, AddIdentityUseCase, IdentityResponse
from .login_with_cli import LoginWithCLIRequest, LoginWithCLIUseCase
from .remove_identity import RemoveIdentityRequest, RemoveIdentityUseCase
from .switch_identity import (
    SwitchIdentityRequest,
    SwitchIdentityResponse,
    SwitchIdentityUseCase,
)
from .update_identity import (
    UpdateIdentityRequest,
    UpdateIdentityResponse,
    UpdateIdentityUseCase,
)

__all__ = [
    "AddIdentityRequest",
    "AddIdentityUseCase",
    "IdentityResponse",
    "LoginWithCLIRequest",
    "LoginWithCLIUseCase",
    "RemoveIdentityRequest",
    "RemoveIdentityUseCase",
    "SwitchIdentityRequest",
    "SwitchIdentityResponse",
    "SwitchIdentityUseCase",
    "UpdateIdentityRequest",
    "UpdateIdentityResponse",
    "UpdateIdentityUseCase",
]
