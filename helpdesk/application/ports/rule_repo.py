"""Port interface for assignment rule persistence."""

from abc import ABC, abstractmethod

from helpdesk.domain.entities.assignment_rule import AssignmentRule


class RuleRepository(ABC):
    @abstractmethod
    async def save(self, rule: AssignmentRule) -> AssignmentRule:
        ...

    @abstractmethod
    async def update(self, rule: AssignmentRule) -> AssignmentRule:
        ...

    @abstractmethod
    async def delete(self, rule_id: int) -> bool:
        ...

    @abstractmethod
    async def get_by_id(self, rule_id: int) -> AssignmentRule | None:
        ...

    @abstractmethod
    async def get_all(self) -> list[AssignmentRule]:
        ...

    @abstractmethod
    async def get_enabled(self) -> list[AssignmentRule]:
        """Enabled rules ordered by priority ASC, then creation time."""
        ...
