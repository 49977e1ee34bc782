"""Assignment strategy contract and the shared least-loaded selection."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from helpdesk.domain.entities.agent import Agent
from helpdesk.domain.entities.customer import Customer
from helpdesk.domain.entities.ticket import Ticket
from helpdesk.domain.value_objects.enums import RuleType
from helpdesk.domain.value_objects.rule_config import RuleConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentContext:
    """Everything a strategy may look at when choosing an agent.

    roster: active agents ordered by creation time, annotated with load.
    last_assignee_id: most recent ledger assignee for the rule type, only
        filled in for strategies with ``uses_history``.
    customer: the ticket's customer, only for strategies with ``uses_customer``.
    """

    ticket: Ticket
    roster: Sequence[Agent]
    config: RuleConfig = field(default_factory=RuleConfig)
    default_category: str = "WZATCO"
    last_assignee_id: int | None = None
    customer: Customer | None = None

    def active_roster(self) -> list[Agent]:
        return [a for a in self.roster if a.is_active]

    def routing_category(self) -> str:
        return self.ticket.routing_category(self.default_category)


class AssignmentStrategy(ABC):
    rule_type: RuleType
    uses_history: bool = False
    uses_customer: bool = False

    @abstractmethod
    def select(self, context: AssignmentContext) -> Agent | None:
        """Return the chosen agent or None when this strategy cannot assign."""
        ...


def pick_least_loaded(agents: Iterable[Agent]) -> Agent | None:
    """Minimum current_load; ties go to the first agent in iteration order."""
    return min(agents, key=lambda a: a.current_load, default=None)


def select_by_load(agents: Sequence[Agent], config: RuleConfig) -> Agent | None:
    """Least-loaded agent under its cap, overflowing to the least-loaded overall.

    Config:
      default_max_load  cap for agents without their own max_load (unbounded)
      overflow          pick among full agents when none is under cap (True)
    """
    if not agents:
        return None

    default_cap = config.get_int("default_max_load")
    available = [a for a in agents if a.is_under_capacity(default_cap)]
    if available:
        return pick_least_loaded(available)

    if not config.get_bool("overflow", True):
        return None
    return pick_least_loaded(agents)


def select_with_fallback(
    matches: Sequence[Agent],
    roster: Sequence[Agent],
    config: RuleConfig,
    what: str,
) -> Agent | None:
    """Load-based pick among *matches*, degrading to the whole roster.

    Config:
      fallback_to_roster  use the full roster when nothing matches (True)
    """
    if matches:
        return select_by_load(matches, config)

    if not config.get_bool("fallback_to_roster", True):
        logger.info("No agent matches %s, fallback disabled", what)
        return None

    if roster:
        logger.warning("No agent matches %s, falling back to full roster", what)
    return select_by_load(roster, config)
