"""ManualStrategy — a rule that never picks an agent."""

from __future__ import annotations

from helpdesk.domain.entities.agent import Agent
from helpdesk.domain.policies.base import AssignmentContext, AssignmentStrategy
from helpdesk.domain.value_objects.enums import RuleType


class ManualStrategy(AssignmentStrategy):
    """As the top-priority rule it stops auto-assignment altogether (see
    ``AssignTicketUseCase``); further down the chain it is simply passed over."""

    rule_type = RuleType.MANUAL

    def select(self, context: AssignmentContext) -> Agent | None:
        return None
