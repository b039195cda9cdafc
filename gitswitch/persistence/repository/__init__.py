"""Repository implementations."""

from gitswitch.persistence.repository.session_state import (
    PreferenceSessionStateRepository,
    SqlSessionStateRepository,
)

__all__ = [
    "PreferenceSessionStateRepository",
    "SqlSessionStateRepository",
]
