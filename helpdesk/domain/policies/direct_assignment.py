"""DirectAssignmentStrategy — if/then routing on ticket fields."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from helpdesk.domain.entities.agent import Agent
from helpdesk.domain.policies.base import (
    AssignmentContext,
    AssignmentStrategy,
    select_by_load,
)
from helpdesk.domain.value_objects.enums import RuleType

logger = logging.getLogger(__name__)


def _key(name: Any) -> str:
    """``productModel``, ``product_model`` and ``ProductModel`` are the same key."""
    return str(name).replace("_", "").lower()


def _ticket_fields(context: AssignmentContext) -> dict[str, str]:
    ticket, customer = context.ticket, context.customer
    return {
        "subject": ticket.subject or "",
        "category": ticket.category or "",
        "priority": ticket.priority.value,
        "productmodel": ticket.product_model or "",
        "productid": ticket.product_id or "",
        "customerid": ticket.customer_id or "",
        "customeremail": customer.email if customer else "",
        "customername": customer.name if customer else "",
    }


def _as_number(value: str) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _compare(op: Callable[[float, float], bool]) -> Callable[[str, str], bool]:
    def check(actual: str, expected: str) -> bool:
        a, b = _as_number(actual), _as_number(expected)
        return a is not None and b is not None and op(a, b)

    return check


# Text operators compare case-insensitively
OPERATORS: dict[str, Callable[[str, str], bool]] = {
    "contains": lambda actual, expected: expected.lower() in actual.lower(),
    "equals": lambda actual, expected: actual.lower() == expected.lower(),
    "startswith": lambda actual, expected: actual.lower().startswith(expected.lower()),
    "endswith": lambda actual, expected: actual.lower().endswith(expected.lower()),
    "greaterthan": _compare(lambda a, b: a > b),
    "lessthan": _compare(lambda a, b: a < b),
}


@dataclass(frozen=True)
class Condition:
    field: str
    operator: str
    value: str
    use_or: bool = False  # how this result joins the ones before it

    @classmethod
    def parse(cls, raw: Any) -> Condition | None:
        """None for incomplete or unreadable entries, which are skipped."""
        if not isinstance(raw, Mapping):
            logger.warning("Ignoring non-object condition %r", raw)
            return None
        field, operator, value = raw.get("field"), raw.get("operator"), raw.get("value")
        if not field or not operator or value is None or value == "":
            return None
        return cls(
            field=_key(field),
            operator=_key(operator),
            value=str(value),
            use_or=str(raw.get("logic") or "AND").strip().upper() == "OR",
        )

    def matches(self, fields: Mapping[str, str]) -> bool | None:
        """None when the field is unknown, so the condition does not count."""
        if self.field not in fields:
            logger.warning("Ignoring condition on unknown field %r", self.field)
            return None
        check = OPERATORS.get(self.operator)
        if check is None:
            logger.warning("Unknown condition operator %r never matches", self.operator)
            return False
        return check(fields[self.field], self.value)


def conditions_met(raw_conditions: list[Any], fields: Mapping[str, str]) -> bool:
    """Fold condition results left to right, each joined by its own AND/OR.

    No usable condition means the rule does not apply.
    """
    met: bool | None = None
    for raw in raw_conditions:
        condition = Condition.parse(raw)
        if condition is None:
            continue
        result = condition.matches(fields)
        if result is None:
            continue
        if met is None:
            met = result
        elif condition.use_or:
            met = met or result
        else:
            met = met and result
    return bool(met)


class DirectAssignmentStrategy(AssignmentStrategy):
    """Assign to a named agent or department when the ticket matches.

    Config:
      conditions      list of {field, operator, value, logic}
      assign_to       agent id, or department name (alias ``assignTo``)
      assign_to_type  "agent" (default) or "department" (alias ``assignToType``)

    A department target picks its least-loaded agent. A target that is not
    on the roster (inactive, offline, unknown) yields no agent.
    """

    rule_type = RuleType.DIRECT_ASSIGNMENT
    uses_customer = True

    def select(self, context: AssignmentContext) -> Agent | None:
        config = context.config
        conditions = config.get_list("conditions")
        if not conditions_met(conditions, _ticket_fields(context)):
            return None

        target = config.values.get("assign_to", config.values.get("assignTo"))
        if target is None or str(target).strip() == "":
            logger.warning("Direct assignment rule matched but has no assign_to target")
            return None
        target = str(target).strip()
        target_type = (
            config.get_str("assign_to_type") or config.get_str("assignToType") or "agent"
        ).lower()

        roster = context.active_roster()
        if target_type == "agent":
            return next((a for a in roster if str(a.id) == target), None)
        if target_type == "department":
            return select_by_load([a for a in roster if a.department == target], config)

        logger.warning("Unknown assign_to_type %r", target_type)
        return None
