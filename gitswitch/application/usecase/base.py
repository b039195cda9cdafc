"""Base use case."""

from abc import ABC, abstractmethod
from typing import Any


class BaseUseCase(ABC):
    """One user-facing operation on the session.

    Use cases validate input, call the coordinator and shape the response;
    they hold no state between calls.
    """

    @abstractmethod
    async def execute(self, request: Any) -> Any:
        pass
