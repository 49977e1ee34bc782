"""Tests for CreateTicketUseCase with in-memory fakes."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from helpdesk.application.errors import IdentifierGenerationError
from helpdesk.application.use_cases.assign_ticket import (
    REASON_FAILED,
    REASON_NO_RULES,
    AssignTicketUseCase,
    RuleEvaluator,
)
from helpdesk.application.use_cases.create_ticket import CreateTicketUseCase, NewTicket
from helpdesk.application.use_cases.identity_builder import IdentityBuilder
from helpdesk.config import DEFAULT_CATEGORY_CODES
from helpdesk.domain.entities.assignment_rule import AssignmentRule
from helpdesk.domain.entities.customer import Customer
from helpdesk.domain.value_objects.enums import Priority, TicketStatus
from helpdesk.domain.value_objects.identifiers import IdentifierCodes
from routing_fakes import (
    FakeActivityRepo,
    FakeAgentRepo,
    FakeCustomerRepo,
    FakeHistoryRepo,
    FakeRuleRepo,
    FakeSequenceRepo,
    FakeTicketRepo,
    FakeTransactions,
    make_agent,
)

NOW = datetime(2025, 1, 10, 9, 30, tzinfo=timezone.utc)


class BrokenRuleRepo(FakeRuleRepo):
    async def get_enabled(self):
        raise RuntimeError("rules table locked")


def _make_use_case(agents=None, rules=None, customers=None, rule_repo=None, sequence_fail=False):
    tickets = FakeTicketRepo()
    customer_repo = FakeCustomerRepo(customers)
    sequences = FakeSequenceRepo(tickets, customer_repo, fail=sequence_fail)
    history = FakeHistoryRepo()
    if rules is None:
        rules = [AssignmentRule(id=None, name="Least loaded", rule_type="load_based")]
    evaluator = RuleEvaluator(
        agent_repo=FakeAgentRepo(agents if agents is not None else [make_agent(1)], tickets),
        rule_repo=rule_repo or FakeRuleRepo(rules),
        history_repo=history,
    )
    assign = AssignTicketUseCase(
        ticket_repo=tickets,
        evaluator=evaluator,
        history_repo=history,
        activity_repo=FakeActivityRepo(),
        sequence_repo=sequences,
        transactions=FakeTransactions(),
    )
    uc = CreateTicketUseCase(
        ticket_repo=tickets,
        customer_repo=customer_repo,
        identities=IdentityBuilder(sequences, IdentifierCodes(DEFAULT_CATEGORY_CODES)),
        assign_ticket=assign,
        transactions=FakeTransactions(),
    )
    return uc, tickets, customer_repo


def _event_names(result):
    return [e.name for e in result.events]


def _request(**overrides) -> NewTicket:
    data = dict(
        subject="Projector will not turn on",
        customer_name="Sam Lee",
        customer_email="sam@example.com",
        category="Technical",
        priority=Priority.HIGH,
        product_model="Pro-X",
    )
    data.update(overrides)
    return NewTicket(**data)


@pytest.mark.asyncio
async def test_creates_customer_ticket_and_assigns():
    uc, tickets, customers = _make_use_case()
    result = await uc.execute(_request(), now=NOW)

    assert result.customer.id == "CUST-2501-TEC-PRO-001"
    assert result.customer_created is True
    assert result.ticket.id == "TKT-2501-001"
    assert result.ticket.status == TicketStatus.OPEN
    assert result.ticket.assignee_id == 1
    assert result.assignment.assigned is True
    assert tickets.tickets["TKT-2501-001"].assignee_id == 1
    assert _event_names(result) == ["ticket.assigned", "customer.created", "ticket.created"]


@pytest.mark.asyncio
async def test_existing_customer_is_reused():
    existing = Customer(id="CUST-2412-WZ-GEN-003", name="Sam Lee", email="sam@example.com")
    uc, _, customers = _make_use_case(customers=[existing])
    result = await uc.execute(_request(), now=NOW)

    assert result.customer.id == "CUST-2412-WZ-GEN-003"
    assert result.customer_created is False
    assert result.ticket.customer_id == "CUST-2412-WZ-GEN-003"
    assert len(customers.customers) == 1
    assert _event_names(result) == ["ticket.assigned", "ticket.created"]


@pytest.mark.asyncio
async def test_missing_category_uses_default():
    uc, _, _ = _make_use_case()
    result = await uc.execute(_request(category=None, product_model=None), now=NOW)

    assert result.ticket.category == "WZATCO"
    assert result.customer.id == "CUST-2501-WZ-GEN-001"


@pytest.mark.asyncio
async def test_ticket_ids_advance_within_month():
    uc, _, _ = _make_use_case()
    first = await uc.execute(_request(), now=NOW)
    second = await uc.execute(_request(), now=NOW)

    assert first.ticket.id == "TKT-2501-001"
    assert second.ticket.id == "TKT-2501-002"


@pytest.mark.asyncio
async def test_no_agents_leaves_ticket_unassigned():
    uc, tickets, _ = _make_use_case(agents=[])
    result = await uc.execute(_request(), now=NOW)

    assert result.assignment.assigned is False
    assert tickets.tickets[result.ticket.id].assignee_id is None


@pytest.mark.asyncio
async def test_no_rules_reported():
    uc, _, _ = _make_use_case(rules=[])
    result = await uc.execute(_request(), now=NOW)
    assert result.assignment.reason == REASON_NO_RULES


@pytest.mark.asyncio
async def test_assignment_crash_does_not_block_creation():
    uc, tickets, _ = _make_use_case(rule_repo=BrokenRuleRepo())
    result = await uc.execute(_request(), now=NOW)

    assert result.assignment.to_dict() == {"assigned": False, "reason": REASON_FAILED}
    assert result.ticket.id in tickets.tickets
    assert tickets.tickets[result.ticket.id].assignee_id is None
    assert _event_names(result) == ["customer.created", "ticket.created"]


@pytest.mark.asyncio
async def test_identifier_failure_fails_creation():
    uc, tickets, _ = _make_use_case(sequence_fail=True)
    with pytest.raises(IdentifierGenerationError):
        await uc.execute(_request(), now=NOW)
    assert tickets.tickets == {}
