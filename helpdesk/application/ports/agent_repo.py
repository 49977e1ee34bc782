"""Port interface for the agent roster."""

from abc import ABC, abstractmethod

from helpdesk.domain.entities.agent import Agent


class AgentRepository(ABC):
    @abstractmethod
    async def save(self, agent: Agent) -> Agent:
        ...

    @abstractmethod
    async def get_by_id(self, agent_id: int) -> Agent | None:
        ...

    @abstractmethod
    async def get_roster(self, require_online: bool = True) -> list[Agent]:
        """Active agents ordered by creation time, each with current_load set.

        current_load counts the agent's tickets in status open or pending.
        """
        ...
