"""Port interfaces for the assignment ledger and the ticket audit trail."""

from abc import ABC, abstractmethod

from helpdesk.domain.entities.assignment_history import (
    AssignmentHistoryEntry,
    TicketActivity,
)


class AssignmentHistoryRepository(ABC):
    """Append-only: entries are never updated or deleted."""

    @abstractmethod
    async def append(self, entry: AssignmentHistoryEntry) -> AssignmentHistoryEntry:
        ...

    @abstractmethod
    async def last_for_rule_type(self, rule_type: str) -> AssignmentHistoryEntry | None:
        """Most recently written entry for the rule type.

        Ordered by id, which follows the rotation lock order. assigned_at
        does not: two transactions can stamp it out of order.
        """
        ...

    @abstractmethod
    async def list_for_conversation(self, conversation_id: str) -> list[AssignmentHistoryEntry]:
        ...


class ActivityRepository(ABC):
    @abstractmethod
    async def record(self, activity: TicketActivity) -> TicketActivity:
        ...
