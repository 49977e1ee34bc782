"""StrategyRegistry — maps a rule's type tag to its strategy."""

from __future__ import annotations

from collections.abc import Iterable

from helpdesk.domain.policies.base import AssignmentStrategy
from helpdesk.domain.policies.department_match import DepartmentMatchStrategy
from helpdesk.domain.policies.direct_assignment import DirectAssignmentStrategy
from helpdesk.domain.policies.load_based import LoadBasedStrategy
from helpdesk.domain.policies.manual import ManualStrategy
from helpdesk.domain.policies.round_robin import RoundRobinStrategy
from helpdesk.domain.policies.skill_match import SkillMatchStrategy


class StrategyRegistry:
    def __init__(self, strategies: Iterable[AssignmentStrategy]):
        self._by_type: dict[str, AssignmentStrategy] = {}
        for strategy in strategies:
            self.register(strategy)

    def register(self, strategy: AssignmentStrategy) -> None:
        self._by_type[strategy.rule_type.value] = strategy

    def get(self, rule_type: str) -> AssignmentStrategy | None:
        return self._by_type.get(rule_type)

    def known_types(self) -> list[str]:
        return sorted(self._by_type)


def default_registry() -> StrategyRegistry:
    return StrategyRegistry(
        [
            RoundRobinStrategy(),
            LoadBasedStrategy(),
            DepartmentMatchStrategy(),
            SkillMatchStrategy(),
            DirectAssignmentStrategy(),
            ManualStrategy(),
        ]
    )
