"""AssignTicketUseCase — rule-driven automatic ticket assignment."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from helpdesk.application.errors import TicketNotFoundError
from helpdesk.application.events import WebhookEvent
from helpdesk.application.ports.agent_repo import AgentRepository
from helpdesk.application.ports.customer_repo import CustomerRepository
from helpdesk.application.ports.history_repo import (
    ActivityRepository,
    AssignmentHistoryRepository,
)
from helpdesk.application.ports.rule_repo import RuleRepository
from helpdesk.application.ports.sequence_repo import SequenceRepository
from helpdesk.application.ports.ticket_repo import TicketRepository
from helpdesk.application.ports.transaction_port import TransactionManager
from helpdesk.domain.entities.agent import Agent
from helpdesk.domain.entities.assignment_history import (
    AssignmentHistoryEntry,
    TicketActivity,
)
from helpdesk.domain.entities.assignment_rule import AssignmentRule
from helpdesk.domain.entities.ticket import Ticket
from helpdesk.domain.policies.base import AssignmentContext
from helpdesk.domain.policies.registry import StrategyRegistry, default_registry
from helpdesk.domain.value_objects.enums import ActivityType, RuleType

logger = logging.getLogger(__name__)

# Counter row whose lock serializes read-last-assignee / decide / write
ROTATION_LOCK_KEY = "assignment-rotation"

REASON_ALREADY_ASSIGNED = "already assigned"
REASON_NO_RULES = "no assignment rules configured"
REASON_NO_AGENT = "no matching rule found an available agent"
REASON_FAILED = "assignment failed"
REASON_MANUAL = "manual assignment enabled; ticket goes to the unassigned queue"


@dataclass
class AssignmentResult:
    """Outcome of one assignment pass."""

    assigned: bool
    agent_id: int | None = None
    agent_name: str | None = None
    rule_id: int | None = None
    rule_name: str | None = None
    rule_type: str | None = None
    reason: str | None = None
    # Published by the caller after commit
    events: list[WebhookEvent] = field(default_factory=list)

    @classmethod
    def not_assigned(cls, reason: str) -> AssignmentResult:
        return cls(assigned=False, reason=reason)

    def to_dict(self) -> dict[str, Any]:
        if not self.assigned:
            return {"assigned": False, "reason": self.reason}
        return {
            "assigned": True,
            "agentId": self.agent_id,
            "agentName": self.agent_name,
            "ruleId": self.rule_id,
            "ruleName": self.rule_name,
            "ruleType": self.rule_type,
        }


@dataclass
class PreviewEntry:
    rule: AssignmentRule
    agent: Agent | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ruleId": self.rule.id,
            "ruleName": self.rule.name,
            "ruleType": self.rule.rule_type,
            "priority": self.rule.priority,
            "matched": self.agent is not None,
            "agent": (
                {"id": self.agent.id, "name": self.agent.name}
                if self.agent is not None
                else None
            ),
        }


@dataclass
class PreviewResult:
    entries: list[PreviewEntry] = field(default_factory=list)
    reason: str | None = None

    @property
    def first_match(self) -> PreviewEntry | None:
        return next((e for e in self.entries if e.agent is not None), None)

    def to_dict(self) -> dict[str, Any]:
        first = self.first_match
        data: dict[str, Any] = {
            "results": [e.to_dict() for e in self.entries],
            "firstMatch": first.to_dict() if first else None,
        }
        if self.reason:
            data["reason"] = self.reason
        return data


class RuleEvaluator:
    """Runs enabled rules against a ticket without writing anything."""

    def __init__(
        self,
        agent_repo: AgentRepository,
        rule_repo: RuleRepository,
        history_repo: AssignmentHistoryRepository,
        strategies: StrategyRegistry | None = None,
        default_category: str = "WZATCO",
        require_online: bool = True,
        customer_repo: CustomerRepository | None = None,
    ):
        self._agents = agent_repo
        self._customers = customer_repo
        self._rules = rule_repo
        self._history = history_repo
        self._strategies = strategies or default_registry()
        self._default_category = default_category
        self._require_online = require_online

    async def enabled_rules(self) -> list[AssignmentRule]:
        return await self._rules.get_enabled()

    @staticmethod
    def manual_first(rules: Sequence[AssignmentRule]) -> bool:
        """A top-priority manual rule turns auto-assignment off."""
        return bool(rules) and rules[0].rule_type == RuleType.MANUAL.value

    async def roster(self) -> list[Agent]:
        return await self._agents.get_roster(self._require_online)

    async def evaluate(
        self, rule: AssignmentRule, ticket: Ticket, roster: Sequence[Agent]
    ) -> Agent | None:
        """Apply one rule; faults inside a strategy only disqualify that rule."""
        strategy = self._strategies.get(rule.rule_type)
        if strategy is None:
            logger.warning("Unknown rule type %r on rule %s, skipping", rule.rule_type, rule.id)
            return None

        try:
            last_assignee_id = None
            if strategy.uses_history:
                last = await self._history.last_for_rule_type(rule.rule_type)
                last_assignee_id = last.assigned_to_id if last else None

            customer = None
            if strategy.uses_customer and self._customers is not None:
                customer = await self._customers.get_by_id(ticket.customer_id)

            context = AssignmentContext(
                ticket=ticket,
                roster=roster,
                config=rule.rule_config(),
                default_category=self._default_category,
                last_assignee_id=last_assignee_id,
                customer=customer,
            )
            agent = strategy.select(context)
        except Exception:
            logger.exception("Rule %s (%s) failed for ticket %s", rule.id, rule.rule_type, ticket.id)
            return None

        if agent is not None and not agent.is_active:
            logger.error("Rule %s picked inactive agent %s, ignoring", rule.id, agent.id)
            return None
        return agent


class AssignTicketUseCase:
    """Assign an unassigned ticket to the first agent any enabled rule yields.

    Pipeline:
    1. Idempotence guard — assigned tickets are left untouched
    2. Under the rotation lock: evaluate rules in priority order,
       unless a manual rule comes first
    3. Conditionally persist the assignee
    4. Best-effort ledger entry + audit activity (own savepoints)
    5. Queue the ticket.assigned event on the result
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        evaluator: RuleEvaluator,
        history_repo: AssignmentHistoryRepository,
        activity_repo: ActivityRepository,
        sequence_repo: SequenceRepository,
        transactions: TransactionManager,
    ):
        self._tickets = ticket_repo
        self._evaluator = evaluator
        self._history = history_repo
        self._activities = activity_repo
        self._sequences = sequence_repo
        self._tx = transactions

    async def execute(self, ticket_id: str) -> AssignmentResult:
        ticket = await self._tickets.get_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)

        if ticket.is_assigned():
            logger.info("Ticket %s already assigned to %s", ticket.id, ticket.assignee_id)
            return AssignmentResult.not_assigned(REASON_ALREADY_ASSIGNED)

        async with self._sequences.locked(ROTATION_LOCK_KEY):
            rules = await self._evaluator.enabled_rules()
            if not rules:
                logger.info("Ticket %s: no assignment rules configured", ticket.id)
                return AssignmentResult.not_assigned(REASON_NO_RULES)
            if self._evaluator.manual_first(rules):
                logger.info("Ticket %s left unassigned: manual assignment rule first", ticket.id)
                return AssignmentResult.not_assigned(REASON_MANUAL)

            roster = await self._evaluator.roster()
            for rule in rules:
                agent = await self._evaluator.evaluate(rule, ticket, roster)
                if agent is not None:
                    break
            else:
                logger.warning(
                    "Ticket %s: %d rule(s) evaluated, no available agent",
                    ticket.id, len(rules),
                )
                return AssignmentResult.not_assigned(REASON_NO_AGENT)

            if not await self._tickets.assign_if_unassigned(ticket.id, agent.id):
                logger.info("Ticket %s was assigned concurrently", ticket.id)
                return AssignmentResult.not_assigned(REASON_ALREADY_ASSIGNED)

            ticket.assignee_id = agent.id
            await self._record(ticket, rule, agent)

        logger.info(
            "Ticket %s → Agent %s (rule: %s, type: %s, load: %d)",
            ticket.id, agent.name, rule.name, rule.rule_type, agent.current_load,
        )
        result = AssignmentResult(
            assigned=True,
            agent_id=agent.id,
            agent_name=agent.name,
            rule_id=rule.id,
            rule_name=rule.name,
            rule_type=rule.rule_type,
        )
        result.events.append(
            WebhookEvent("ticket.assigned", {"ticketId": ticket.id, "assignment": result.to_dict()})
        )
        return result

    async def _record(self, ticket: Ticket, rule: AssignmentRule, agent: Agent) -> None:
        entry = AssignmentHistoryEntry(
            id=None,
            rule_id=rule.id,
            rule_type=rule.rule_type,
            conversation_id=ticket.id,
            assigned_to_id=agent.id,
            metadata={"agent_load": agent.current_load + 1, "rule_name": rule.name},
        )
        await self._best_effort("assignment history", ticket, lambda: self._history.append(entry))

        activity = TicketActivity(
            id=None,
            conversation_id=ticket.id,
            activity_type=ActivityType.ASSIGNED,
            new_value=str(agent.id),
            performed_by="system",
            performed_by_name="Assignment Engine",
        )
        await self._best_effort("assignment activity", ticket, lambda: self._activities.record(activity))

    async def _best_effort(
        self, what: str, ticket: Ticket, write: Callable[[], Awaitable[object]]
    ) -> None:
        try:
            async with self._tx.savepoint():
                await write()
        except Exception:
            logger.exception("Failed to write %s for ticket %s", what, ticket.id)


class PreviewAssignmentUseCase:
    """Dry-run the rule chain: report each rule's pick up to the first match."""

    def __init__(self, ticket_repo: TicketRepository, evaluator: RuleEvaluator):
        self._tickets = ticket_repo
        self._evaluator = evaluator

    async def execute(self, ticket_id: str) -> PreviewResult:
        ticket = await self._tickets.get_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)

        rules = await self._evaluator.enabled_rules()
        if not rules:
            return PreviewResult(reason=REASON_NO_RULES)
        if self._evaluator.manual_first(rules):
            return PreviewResult(reason=REASON_MANUAL)

        roster = await self._evaluator.roster()
        preview = PreviewResult()
        for rule in rules:
            agent = await self._evaluator.evaluate(rule, ticket, roster)
            preview.entries.append(PreviewEntry(rule=rule, agent=agent))
            if agent is not None:
                break

        if preview.first_match is None:
            preview.reason = REASON_NO_AGENT
        return preview
