"""SkillMatchStrategy — route to agents tagged with the ticket category as a skill."""

from __future__ import annotations

import logging

from helpdesk.domain.entities.agent import Agent
from helpdesk.domain.policies.base import (
    AssignmentContext,
    AssignmentStrategy,
    select_with_fallback,
)
from helpdesk.domain.value_objects.enums import RuleType

logger = logging.getLogger(__name__)


def _has_skill(agent: Agent, skill: str) -> bool:
    try:
        return agent.has_skill(skill)
    except TypeError:
        # Corrupt skills on one record only excludes that agent
        logger.warning("Agent %s has unreadable skills %r", agent.id, agent.skills)
        return False


class SkillMatchStrategy(AssignmentStrategy):
    rule_type = RuleType.SKILL_MATCH

    def select(self, context: AssignmentContext) -> Agent | None:
        skill = context.config.get_str("skill") or context.routing_category()
        roster = context.active_roster()
        matches = [a for a in roster if _has_skill(a, skill)]
        return select_with_fallback(matches, roster, context.config, f"skill {skill!r}")
