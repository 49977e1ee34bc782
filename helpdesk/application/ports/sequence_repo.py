"""Port interface for partition-scoped counters and the locks built on them."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

from helpdesk.domain.value_objects.enums import SequenceScope


class SequenceRepository(ABC):
    @abstractmethod
    async def next_value(self, scope: SequenceScope, prefix: str) -> int:
        """Atomically increment the counter for *prefix* and return the new value.

        A missing counter is first seeded with the highest sequence found among
        existing identifiers of *scope* that start with *prefix*, so historical
        identifiers are never reissued.
        """
        ...

    @abstractmethod
    def locked(self, key: str) -> AbstractAsyncContextManager[None]:
        """Hold an exclusive lock on the counter row *key* for the enclosed block.

        The SQL implementation keeps the row lock until the surrounding
        transaction ends.
        """
        ...
