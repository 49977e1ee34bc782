"""RoundRobinStrategy — rotate through the roster in creation order."""

from __future__ import annotations

from collections.abc import Sequence

from helpdesk.domain.entities.agent import Agent
from helpdesk.domain.policies.base import AssignmentContext, AssignmentStrategy
from helpdesk.domain.value_objects.enums import RuleType


def pick_next(candidates: Sequence[Agent], last_assignee_id: int | None) -> Agent | None:
    """Deterministic round-robin pick from a creation-ordered candidate list.

    1. Locate the last assignee in the list.
    2. Return the agent after it, wrapping with *(index + 1) mod len*.
    3. Start at index 0 when there is no last assignee or it left the list.

    The rotation position is derived from list index, so the candidate order
    must be stable between calls.
    """
    if not candidates:
        return None

    next_index = 0
    if last_assignee_id is not None:
        for index, agent in enumerate(candidates):
            if agent.id == last_assignee_id:
                next_index = (index + 1) % len(candidates)
                break

    return candidates[next_index]


class RoundRobinStrategy(AssignmentStrategy):
    rule_type = RuleType.ROUND_ROBIN
    uses_history = True

    def select(self, context: AssignmentContext) -> Agent | None:
        return pick_next(context.active_roster(), context.last_assignee_id)
