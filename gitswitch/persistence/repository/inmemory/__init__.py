"""In-memory repository implementations for testing."""

from .session_state import InMemorySessionStateRepository

__all__ = ["InMemorySessionStateRepository"]
