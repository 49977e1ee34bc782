"""DepartmentMatchStrategy — route to the department named by the ticket category."""

from __future__ import annotations

from helpdesk.domain.entities.agent import Agent
from helpdesk.domain.policies.base import (
    AssignmentContext,
    AssignmentStrategy,
    select_with_fallback,
)
from helpdesk.domain.value_objects.enums import RuleType


class DepartmentMatchStrategy(AssignmentStrategy):
    """Least-loaded agent of the matching department.

    The department is the rule's ``department`` config value when set,
    otherwise the ticket category (or the default category tag). With no
    department match the rule degrades to load-based over the full roster.
    """

    rule_type = RuleType.DEPARTMENT_MATCH

    def select(self, context: AssignmentContext) -> Agent | None:
        department = context.config.get_str("department") or context.routing_category()
        roster = context.active_roster()
        matches = [a for a in roster if a.department == department]
        return select_with_fallback(
            matches, roster, context.config, f"department {department!r}"
        )
