"""Repository interfaces for gitswitch."""

from gitswitch.domain.repository.session_state import SessionStateRepository

__all__ = ["SessionStateRepository"]
