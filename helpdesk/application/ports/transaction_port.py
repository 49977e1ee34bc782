"""Port interface for nested transaction scopes."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class TransactionManager(ABC):
    @abstractmethod
    def savepoint(self) -> AbstractAsyncContextManager[object]:
        """Scope whose writes are rolled back alone if the block raises."""
        ...
