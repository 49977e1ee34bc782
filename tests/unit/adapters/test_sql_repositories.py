"""Statement-level tests for the SQL repositories.

A scripted session records each statement and answers with canned results;
statements are compiled with the Postgres dialect and inspected.
"""

from __future__ import annotations

import pytest
from sqlalchemy.dialects import postgresql

from helpdesk.adapters.persistence.models import AgentModel
from helpdesk.adapters.persistence.repositories import (
    SqlAgentRepository,
    SqlAssignmentHistoryRepository,
    SqlSequenceRepository,
)
from helpdesk.domain.value_objects.enums import PresenceStatus, SequenceScope


class CannedResult:
    def __init__(self, value=None):
        self._value = value

    def scalar_one_or_none(self):
        return self._value

    def scalar_one(self):
        return self._value

    def scalars(self):
        return iter(self._value or [])

    def all(self):
        return list(self._value or [])


class ScriptedSession:
    def __init__(self, *results):
        self._results = list(results)
        self.statements = []

    async def execute(self, stmt):
        self.statements.append(stmt)
        return self._results.pop(0) if self._results else CannedResult()

    def compiled(self, index):
        return self.statements[index].compile(dialect=postgresql.dialect())


# ─── Sequence counters ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_new_counter_seeded_from_existing_ids_then_incremented():
    session = ScriptedSession(
        CannedResult(None),  # no counter row yet
        CannedResult(["TKT-2501-001", "TKT-2501-002", "TKT-2501-legacy"]),
        CannedResult(),  # seed insert
        CannedResult(3),  # UPDATE … RETURNING
    )
    value = await SqlSequenceRepository(session).next_value(SequenceScope.TICKET, "TKT-2501-")

    assert value == 3
    assert len(session.statements) == 4

    lookup = str(session.compiled(1))
    assert "FROM conversations" in lookup
    assert "LIKE" in lookup

    seed = session.compiled(2)
    assert "ON CONFLICT" in str(seed)
    assert "DO NOTHING" in str(seed)
    assert seed.params["key"] == "TKT-2501-"
    assert seed.params["value"] == 2

    increment = str(session.compiled(3))
    assert increment.startswith("UPDATE sequence_counters")
    assert "sequence_counters.value +" in increment
    assert "RETURNING sequence_counters.value" in increment


@pytest.mark.asyncio
async def test_existing_counter_is_only_incremented():
    session = ScriptedSession(CannedResult("CUST-2501-TEC-PRO-"), CannedResult(8))
    value = await SqlSequenceRepository(session).next_value(
        SequenceScope.CUSTOMER, "CUST-2501-TEC-PRO-"
    )

    assert value == 8
    assert len(session.statements) == 2
    assert "RETURNING" in str(session.compiled(1))


@pytest.mark.asyncio
async def test_customer_counter_seeds_from_customers_table():
    session = ScriptedSession(CannedResult(None), CannedResult([]), CannedResult(), CannedResult(1))
    await SqlSequenceRepository(session).next_value(SequenceScope.CUSTOMER, "CUST-2501-WZ-GEN-")

    assert "FROM customers" in str(session.compiled(1))
    assert session.compiled(2).params["value"] == 0


@pytest.mark.asyncio
async def test_lock_takes_row_lock_on_counter():
    session = ScriptedSession()
    async with SqlSequenceRepository(session).locked("assignment-rotation"):
        held = len(session.statements)

    assert held == 2
    assert "ON CONFLICT" in str(session.compiled(0))
    assert str(session.compiled(1)).rstrip().endswith("FOR UPDATE")


# ─── Assignment ledger ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_last_entry_follows_insert_order():
    session = ScriptedSession(CannedResult(None))
    assert await SqlAssignmentHistoryRepository(session).last_for_rule_type("round_robin") is None

    order_by = str(session.compiled(0)).split("ORDER BY", 1)[1]
    assert "assignment_history.id DESC" in order_by
    assert "assigned_at" not in order_by


# ─── Agents ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_unknown_presence_only_affects_that_agent():
    rows = [
        (AgentModel(id=1, name="Ana", presence_status="busy", is_active=True), 0),
        (AgentModel(id=2, name="Ben", presence_status="online", is_active=True, skills="Billing"), 2),
    ]
    session = ScriptedSession(CannedResult(rows))
    roster = await SqlAgentRepository(session).get_roster(require_online=False)

    assert [a.presence for a in roster] == [PresenceStatus.OFFLINE, PresenceStatus.ONLINE]
    assert roster[1].current_load == 2
    assert roster[1].skills == {"Billing"}
