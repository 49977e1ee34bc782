"""LoadBasedStrategy — least-loaded agent, overflowing when everyone is full."""

from __future__ import annotations

from helpdesk.domain.entities.agent import Agent
from helpdesk.domain.policies.base import AssignmentContext, AssignmentStrategy, select_by_load
from helpdesk.domain.value_objects.enums import RuleType


class LoadBasedStrategy(AssignmentStrategy):
    rule_type = RuleType.LOAD_BASED

    def select(self, context: AssignmentContext) -> Agent | None:
        return select_by_load(context.active_roster(), context.config)
