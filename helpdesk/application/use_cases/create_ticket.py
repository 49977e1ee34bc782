"""CreateTicketUseCase — full pipeline: identify → persist → assign → notify."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from helpdesk.application.events import WebhookEvent
from helpdesk.application.ports.customer_repo import CustomerRepository
from helpdesk.application.ports.ticket_repo import TicketRepository
from helpdesk.application.ports.transaction_port import TransactionManager
from helpdesk.application.use_cases.assign_ticket import (
    REASON_FAILED,
    AssignmentResult,
    AssignTicketUseCase,
)
from helpdesk.application.use_cases.identity_builder import IdentityBuilder
from helpdesk.domain.entities.customer import Customer
from helpdesk.domain.entities.ticket import Ticket
from helpdesk.domain.value_objects.enums import Priority, TicketStatus

logger = logging.getLogger(__name__)


@dataclass
class NewTicket:
    subject: str
    customer_name: str
    customer_email: str
    customer_phone: str | None = None
    category: str | None = None
    priority: Priority = Priority.LOW
    product_model: str | None = None
    product_id: str | None = None


@dataclass
class TicketCreationResult:
    ticket: Ticket
    customer: Customer
    customer_created: bool
    assignment: AssignmentResult
    # Published by the caller after commit
    events: list[WebhookEvent] = field(default_factory=list)


class CreateTicketUseCase:
    """Creates a ticket (and its customer if new), then tries auto-assignment.

    Identifier generation and persistence are on the critical path and raise.
    Assignment never fails the creation: any fault is logged and reported as
    an unassigned result, leaving the ticket for manual assignment.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        customer_repo: CustomerRepository,
        identities: IdentityBuilder,
        assign_ticket: AssignTicketUseCase,
        transactions: TransactionManager,
        default_category: str = "WZATCO",
    ):
        self._tickets = ticket_repo
        self._customers = customer_repo
        self._identities = identities
        self._assign = assign_ticket
        self._tx = transactions
        self._default_category = default_category

    async def execute(self, request: NewTicket, now: datetime | None = None) -> TicketCreationResult:
        now = now or datetime.now(timezone.utc)
        category = (request.category or "").strip() or self._default_category

        # Step 1: Customer (minted only for a new email)
        customer = await self._customers.get_by_email(request.customer_email)
        customer_created = customer is None
        if customer is None:
            customer_id = await self._identities.next_customer_id(
                category, request.product_model, now
            )
            customer = await self._customers.save(
                Customer(
                    id=customer_id,
                    name=request.customer_name,
                    email=request.customer_email,
                    phone=request.customer_phone,
                    created_at=now,
                )
            )

        # Step 2: Ticket, persisted unassigned
        ticket_id = await self._identities.next_ticket_id(category, request.priority.value, now)
        ticket = await self._tickets.save(
            Ticket(
                id=ticket_id,
                subject=request.subject,
                customer_id=customer.id,
                category=category,
                priority=request.priority,
                status=TicketStatus.OPEN,
                product_model=request.product_model,
                product_id=request.product_id,
                created_at=now,
            )
        )
        logger.info("Ticket %s created for customer %s", ticket.id, customer.id)

        # Step 3: Auto-assignment
        assignment = await self._try_assign(ticket)

        # Step 4: Events, dispatched by the caller once committed
        events = list(assignment.events)
        if customer_created:
            events.append(WebhookEvent("customer.created", {"customer": _customer_payload(customer)}))
        events.append(
            WebhookEvent(
                "ticket.created",
                {"ticket": _ticket_payload(ticket), "customer": _customer_payload(customer)},
            )
        )

        return TicketCreationResult(
            ticket=ticket,
            customer=customer,
            customer_created=customer_created,
            assignment=assignment,
            events=events,
        )

    async def _try_assign(self, ticket: Ticket) -> AssignmentResult:
        try:
            async with self._tx.savepoint():
                result = await self._assign.execute(ticket.id)
        except Exception:
            logger.exception("Auto-assignment failed for ticket %s", ticket.id)
            return AssignmentResult.not_assigned(REASON_FAILED)

        if result.assigned:
            ticket.assignee_id = result.agent_id
        return result


def _ticket_payload(ticket: Ticket) -> dict:
    return {
        "id": ticket.id,
        "subject": ticket.subject,
        "status": ticket.status.value,
        "priority": ticket.priority.value,
        "category": ticket.category,
        "customerId": ticket.customer_id,
        "assigneeId": ticket.assignee_id,
        "createdAt": ticket.created_at.isoformat() if ticket.created_at else None,
    }


def _customer_payload(customer: Customer) -> dict:
    return {"id": customer.id, "name": customer.name, "email": customer.email}
