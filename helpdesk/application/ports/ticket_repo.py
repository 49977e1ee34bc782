"""Port interface for ticket persistence."""

from abc import ABC, abstractmethod

from helpdesk.domain.entities.ticket import Ticket


class TicketRepository(ABC):
    @abstractmethod
    async def save(self, ticket: Ticket) -> Ticket:
        """Insert a new ticket.

        Raises DuplicateIdentifierError if the id is already taken.
        """
        ...

    @abstractmethod
    async def get_by_id(self, ticket_id: str) -> Ticket | None:
        ...

    @abstractmethod
    async def assign_if_unassigned(self, ticket_id: str, agent_id: int) -> bool:
        """Set the assignee only while it is still NULL.

        Returns False when another writer assigned the ticket first.
        """
        ...
