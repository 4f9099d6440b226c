"""Base use case."""

from abc import ABC, abstractmethod
from typing import Any


class BaseUseCase(ABC):
    """Base use case for orchestrating domain services inside a transaction."""

    @abstractmethod
    async def execute(self, request: Any) -> Any:
        pass
