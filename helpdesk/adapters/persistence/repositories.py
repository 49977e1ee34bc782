"""SQLAlchemy repository implementations."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.adapters.persistence.models import (
    AgentModel,
    AssignmentHistoryModel,
    AssignmentRuleModel,
    ConversationModel,
    CustomerModel,
    SequenceCounterModel,
    TicketActivityModel,
)
from helpdesk.application.errors import DuplicateIdentifierError
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
from helpdesk.domain.entities.agent import Agent, parse_presence, parse_skills
from helpdesk.domain.entities.assignment_history import (
    AssignmentHistoryEntry,
    TicketActivity,
)
from helpdesk.domain.entities.assignment_rule import AssignmentRule
from helpdesk.domain.entities.customer import Customer
from helpdesk.domain.entities.ticket import Ticket
from helpdesk.domain.value_objects.enums import (
    ACTIVE_STATUSES,
    PresenceStatus,
    Priority,
    SequenceScope,
    TicketStatus,
)
from helpdesk.domain.value_objects.identifiers import max_sequence
from helpdesk.domain.value_objects.rule_config import parse_config

# ─── Mappers ─────────────────────────────────────────────────────────


def _agent_to_domain(m: AgentModel, current_load: int = 0) -> Agent:
    return Agent(
        id=m.id,
        name=m.name,
        department=m.department,
        skills=parse_skills(m.skills),
        is_active=m.is_active,
        presence=parse_presence(m.presence_status),
        max_load=m.max_load,
        current_load=current_load,
        created_at=m.created_at,
    )


def _ticket_to_domain(m: ConversationModel) -> Ticket:
    return Ticket(
        id=m.id,
        subject=m.subject,
        customer_id=m.customer_id,
        category=m.category,
        priority=Priority(m.priority),
        status=TicketStatus(m.status),
        assignee_id=m.assignee_id,
        product_model=m.product_model,
        product_id=m.product_id,
        created_at=m.created_at,
    )


def _customer_to_domain(m: CustomerModel) -> Customer:
    return Customer(
        id=m.id, name=m.name, email=m.email, phone=m.phone, created_at=m.created_at
    )


def _rule_to_domain(m: AssignmentRuleModel) -> AssignmentRule:
    return AssignmentRule(
        id=m.id,
        name=m.name,
        rule_type=m.rule_type,
        priority=m.priority,
        enabled=m.enabled,
        config=parse_config(m.config),
        description=m.description,
        created_at=m.created_at,
    )


def _history_to_domain(m: AssignmentHistoryModel) -> AssignmentHistoryEntry:
    return AssignmentHistoryEntry(
        id=m.id,
        rule_id=m.rule_id,
        rule_type=m.rule_type,
        conversation_id=m.conversation_id,
        assigned_to_id=m.assigned_to_id,
        assigned_at=m.assigned_at,
        metadata=dict(m.details or {}),
    )


# ─── Repositories ────────────────────────────────────────────────────


class SqlAgentRepository(AgentRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, agent: Agent) -> Agent:
        m = AgentModel(
            name=agent.name,
            department=agent.department,
            skills=json.dumps(sorted(agent.skills)),
            is_active=agent.is_active,
            presence_status=agent.presence.value,
            max_load=agent.max_load,
        )
        self._s.add(m)
        await self._s.flush()
        agent.id = m.id
        agent.created_at = m.created_at
        return agent

    async def get_by_id(self, agent_id: int) -> Agent | None:
        m = await self._s.get(AgentModel, agent_id)
        return _agent_to_domain(m) if m else None

    async def get_roster(self, require_online: bool = True) -> list[Agent]:
        load = (
            select(
                ConversationModel.assignee_id.label("agent_id"),
                func.count(ConversationModel.id).label("load"),
            )
            .where(ConversationModel.status.in_([s.value for s in ACTIVE_STATUSES]))
            .where(ConversationModel.assignee_id.is_not(None))
            .group_by(ConversationModel.assignee_id)
            .subquery()
        )
        stmt = (
            select(AgentModel, func.coalesce(load.c.load, 0))
            .outerjoin(load, load.c.agent_id == AgentModel.id)
            .where(AgentModel.is_active.is_(True))
            .order_by(AgentModel.created_at, AgentModel.id)
        )
        if require_online:
            stmt = stmt.where(AgentModel.presence_status == PresenceStatus.ONLINE.value)

        result = await self._s.execute(stmt)
        return [_agent_to_domain(m, int(current_load)) for m, current_load in result.all()]


class SqlTicketRepository(TicketRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, ticket: Ticket) -> Ticket:
        m = ConversationModel(
            id=ticket.id,
            subject=ticket.subject,
            customer_id=ticket.customer_id,
            category=ticket.category,
            priority=ticket.priority.value,
            status=ticket.status.value,
            assignee_id=ticket.assignee_id,
            product_model=ticket.product_model,
            product_id=ticket.product_id,
        )
        if ticket.created_at is not None:
            m.created_at = ticket.created_at
        try:
            async with self._s.begin_nested():
                self._s.add(m)
                await self._s.flush()
        except IntegrityError as e:
            raise DuplicateIdentifierError(ticket.id) from e
        ticket.created_at = m.created_at
        return ticket

    async def get_by_id(self, ticket_id: str) -> Ticket | None:
        result = await self._s.execute(
            select(ConversationModel)
            .where(ConversationModel.id == ticket_id)
            .execution_options(populate_existing=True)
        )
        m = result.scalar_one_or_none()
        return _ticket_to_domain(m) if m else None

    async def assign_if_unassigned(self, ticket_id: str, agent_id: int) -> bool:
        result = await self._s.execute(
            update(ConversationModel)
            .where(ConversationModel.id == ticket_id)
            .where(ConversationModel.assignee_id.is_(None))
            .values(assignee_id=agent_id)
            .execution_options(synchronize_session=False)
        )
        await self._s.flush()
        return result.rowcount == 1


class SqlCustomerRepository(CustomerRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, customer: Customer) -> Customer:
        m = CustomerModel(
            id=customer.id,
            name=customer.name,
            email=customer.email,
            phone=customer.phone,
        )
        if customer.created_at is not None:
            m.created_at = customer.created_at
        try:
            async with self._s.begin_nested():
                self._s.add(m)
                await self._s.flush()
        except IntegrityError as e:
            raise DuplicateIdentifierError(customer.id) from e
        customer.created_at = m.created_at
        return customer

    async def get_by_id(self, customer_id: str) -> Customer | None:
        m = await self._s.get(CustomerModel, customer_id)
        return _customer_to_domain(m) if m else None

    async def get_by_email(self, email: str) -> Customer | None:
        result = await self._s.execute(
            select(CustomerModel).where(CustomerModel.email == email)
        )
        m = result.scalar_one_or_none()
        return _customer_to_domain(m) if m else None


class SqlRuleRepository(RuleRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, rule: AssignmentRule) -> AssignmentRule:
        m = AssignmentRuleModel(
            name=rule.name,
            rule_type=rule.rule_type,
            priority=rule.priority,
            enabled=rule.enabled,
            config=rule.config or None,
            description=rule.description,
        )
        self._s.add(m)
        await self._s.flush()
        rule.id = m.id
        rule.created_at = m.created_at
        return rule

    async def update(self, rule: AssignmentRule) -> AssignmentRule:
        await self._s.execute(
            update(AssignmentRuleModel)
            .where(AssignmentRuleModel.id == rule.id)
            .values(
                name=rule.name,
                rule_type=rule.rule_type,
                priority=rule.priority,
                enabled=rule.enabled,
                config=rule.config or None,
                description=rule.description,
            )
            .execution_options(synchronize_session=False)
        )
        await self._s.flush()
        return rule

    async def delete(self, rule_id: int) -> bool:
        result = await self._s.execute(
            delete(AssignmentRuleModel).where(AssignmentRuleModel.id == rule_id)
        )
        await self._s.flush()
        return result.rowcount > 0

    async def get_by_id(self, rule_id: int) -> AssignmentRule | None:
        result = await self._s.execute(
            select(AssignmentRuleModel).where(AssignmentRuleModel.id == rule_id)
        )
        m = result.scalar_one_or_none()
        return _rule_to_domain(m) if m else None

    async def get_all(self) -> list[AssignmentRule]:
        result = await self._s.execute(
            select(AssignmentRuleModel).order_by(
                AssignmentRuleModel.priority, AssignmentRuleModel.created_at, AssignmentRuleModel.id
            )
        )
        return [_rule_to_domain(m) for m in result.scalars()]

    async def get_enabled(self) -> list[AssignmentRule]:
        result = await self._s.execute(
            select(AssignmentRuleModel)
            .where(AssignmentRuleModel.enabled.is_(True))
            .order_by(
                AssignmentRuleModel.priority, AssignmentRuleModel.created_at, AssignmentRuleModel.id
            )
        )
        return [_rule_to_domain(m) for m in result.scalars()]


class SqlAssignmentHistoryRepository(AssignmentHistoryRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def append(self, entry: AssignmentHistoryEntry) -> AssignmentHistoryEntry:
        m = AssignmentHistoryModel(
            rule_id=entry.rule_id,
            rule_type=entry.rule_type,
            conversation_id=entry.conversation_id,
            assigned_to_id=entry.assigned_to_id,
            details=entry.metadata or None,
        )
        self._s.add(m)
        await self._s.flush()
        entry.id = m.id
        entry.assigned_at = m.assigned_at
        return entry

    async def last_for_rule_type(self, rule_type: str) -> AssignmentHistoryEntry | None:
        result = await self._s.execute(
            select(AssignmentHistoryModel)
            .where(AssignmentHistoryModel.rule_type == rule_type)
            .order_by(AssignmentHistoryModel.id.desc())
            .limit(1)
        )
        m = result.scalar_one_or_none()
        return _history_to_domain(m) if m else None

    async def list_for_conversation(self, conversation_id: str) -> list[AssignmentHistoryEntry]:
        result = await self._s.execute(
            select(AssignmentHistoryModel)
            .where(AssignmentHistoryModel.conversation_id == conversation_id)
            .order_by(AssignmentHistoryModel.id)
        )
        return [_history_to_domain(m) for m in result.scalars()]


class SqlActivityRepository(ActivityRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def record(self, activity: TicketActivity) -> TicketActivity:
        m = TicketActivityModel(
            conversation_id=activity.conversation_id,
            activity_type=activity.activity_type.value,
            new_value=activity.new_value,
            performed_by=activity.performed_by,
            performed_by_name=activity.performed_by_name,
        )
        self._s.add(m)
        await self._s.flush()
        activity.id = m.id
        return activity


class SqlSequenceRepository(SequenceRepository):
    """Counter rows in ``sequence_counters``, one per partition prefix.

    Allocation is a single ``UPDATE … SET value = value + 1 RETURNING value``,
    which Postgres serializes on the row lock, so no two callers can observe
    the same value.
    """

    _SCOPE_MODELS = {
        SequenceScope.TICKET: ConversationModel,
        SequenceScope.CUSTOMER: CustomerModel,
    }

    def __init__(self, session: AsyncSession):
        self._s = session

    async def next_value(self, scope: SequenceScope, prefix: str) -> int:
        exists = await self._s.execute(
            select(SequenceCounterModel.key).where(SequenceCounterModel.key == prefix)
        )
        if exists.scalar_one_or_none() is None:
            seed = await self._highest_existing(scope, prefix)
            await self._s.execute(
                pg_insert(SequenceCounterModel)
                .values(key=prefix, value=seed)
                .on_conflict_do_nothing(index_elements=["key"])
            )

        result = await self._s.execute(
            update(SequenceCounterModel)
            .where(SequenceCounterModel.key == prefix)
            .values(value=SequenceCounterModel.value + 1)
            .returning(SequenceCounterModel.value)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one()

    @asynccontextmanager
    async def locked(self, key: str) -> AsyncIterator[None]:
        await self._s.execute(
            pg_insert(SequenceCounterModel)
            .values(key=key, value=0)
            .on_conflict_do_nothing(index_elements=["key"])
        )
        await self._s.execute(
            select(SequenceCounterModel.key)
            .where(SequenceCounterModel.key == key)
            .with_for_update()
        )
        yield

    async def _highest_existing(self, scope: SequenceScope, prefix: str) -> int:
        model = self._SCOPE_MODELS[scope]
        result = await self._s.execute(
            select(model.id).where(model.id.startswith(prefix, autoescape=True))
        )
        return max_sequence(list(result.scalars()))


class SqlTransactionManager(TransactionManager):
    def __init__(self, session: AsyncSession):
        self._s = session

    def savepoint(self):
        return self._s.begin_nested()

