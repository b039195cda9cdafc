"""In-memory session state repository for testing."""

from typing import Optional

from gitswitch.domain.service import SecretStore
from gitswitch.persistence.repository.session_state import (
    PreferenceSessionStateRepository,
)


class InMemorySessionStateRepository(PreferenceSessionStateRepository):
    """In-memory implementation of SessionStateRepository for testing.

    Stores the same serialized strings as the SQL repository, so
    ``values`` can be inspected or corrupted by tests.
    """

    def __init__(self, secret_store: SecretStore, secret_service: str = "gitswitch") -> None:
        super().__init__(secret_store, secret_service)
        self.values: dict[str, str] = {}

    async def read_value(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def write_value(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self.values.pop(key, None)
        else:
            self.values[key] = value
