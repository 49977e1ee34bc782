"""AssignmentRule entity — an administrator-managed routing instruction."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from helpdesk.domain.value_objects.rule_config import RuleConfig


@dataclass
class AssignmentRule:
    id: int | None
    name: str
    rule_type: str  # one of RuleType values; unknown types are skipped by the engine
    priority: int = 0  # ascending = evaluated first
    enabled: bool = True
    config: dict[str, Any] = field(default_factory=dict)
    description: str | None = None
    created_at: datetime | None = None

    def rule_config(self) -> RuleConfig:
        return RuleConfig(self.config)
