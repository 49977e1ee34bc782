"""ManageRulesUseCase — administrator CRUD over assignment rules."""

from __future__ import annotations

import logging
from typing import Any

from helpdesk.application.errors import InvalidRuleError, RuleNotFoundError
from helpdesk.application.ports.rule_repo import RuleRepository
from helpdesk.domain.entities.assignment_rule import AssignmentRule
from helpdesk.domain.value_objects.enums import RuleType
from helpdesk.domain.value_objects.rule_config import parse_config

logger = logging.getLogger(__name__)

# Fields a partial update may touch
EDITABLE_FIELDS = ("name", "rule_type", "priority", "enabled", "config", "description")


def _validate_rule_type(rule_type: str) -> str:
    try:
        return RuleType(rule_type).value
    except ValueError:
        allowed = ", ".join(t.value for t in RuleType)
        raise InvalidRuleError(f"Unknown rule type {rule_type!r}; expected one of: {allowed}")


class ManageRulesUseCase:
    def __init__(self, rule_repo: RuleRepository):
        self._rules = rule_repo

    async def list_rules(self) -> list[AssignmentRule]:
        return await self._rules.get_all()

    async def get_rule(self, rule_id: int) -> AssignmentRule:
        rule = await self._rules.get_by_id(rule_id)
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return rule

    async def create_rule(
        self,
        name: str,
        rule_type: str,
        priority: int = 0,
        enabled: bool = True,
        config: Any = None,
        description: str | None = None,
    ) -> AssignmentRule:
        if not name or not name.strip():
            raise InvalidRuleError("Rule name is required")
        rule = AssignmentRule(
            id=None,
            name=name.strip(),
            rule_type=_validate_rule_type(rule_type),
            priority=priority,
            enabled=enabled,
            config=parse_config(config),
            description=description,
        )
        rule = await self._rules.save(rule)
        logger.info("Created assignment rule %s (%s, priority %d)", rule.id, rule.rule_type, rule.priority)
        return rule

    async def update_rule(self, rule_id: int, changes: dict[str, Any]) -> AssignmentRule:
        """Apply a partial update; keys outside EDITABLE_FIELDS are ignored."""
        rule = await self.get_rule(rule_id)
        for key in EDITABLE_FIELDS:
            if key not in changes:
                continue
            value = changes[key]
            if key == "rule_type":
                value = _validate_rule_type(value)
            elif key == "config":
                value = parse_config(value)
            elif key == "name":
                if not value or not str(value).strip():
                    raise InvalidRuleError("Rule name is required")
                value = str(value).strip()
            setattr(rule, key, value)

        rule = await self._rules.update(rule)
        logger.info("Updated assignment rule %s", rule.id)
        return rule

    async def delete_rule(self, rule_id: int) -> None:
        if not await self._rules.delete(rule_id):
            raise RuleNotFoundError(rule_id)
        logger.info("Deleted assignment rule %s", rule_id)
