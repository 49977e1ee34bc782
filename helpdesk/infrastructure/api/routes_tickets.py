"""Ticket endpoints — create, detail, (re)assign and assignment history."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.adapters.persistence.database import get_session
from helpdesk.application.errors import (
    DuplicateIdentifierError,
    IdentifierGenerationError,
    TicketNotFoundError,
)
from helpdesk.application.events import publish_events
from helpdesk.application.ports.history_repo import AssignmentHistoryRepository
from helpdesk.application.ports.ticket_repo import TicketRepository
from helpdesk.application.ports.webhook_port import WebhookPort
from helpdesk.application.use_cases.assign_ticket import AssignTicketUseCase
from helpdesk.application.use_cases.create_ticket import CreateTicketUseCase, NewTicket
from helpdesk.domain.entities.assignment_history import AssignmentHistoryEntry
from helpdesk.domain.entities.customer import Customer
from helpdesk.domain.entities.ticket import Ticket
from helpdesk.domain.value_objects.enums import Priority
from helpdesk.infrastructure.api.dependencies import (
    get_assign_ticket_uc,
    get_create_ticket_uc,
    get_history_repo,
    get_ticket_repo,
    get_webhooks,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tickets", tags=["tickets"])


class CreateTicketRequest(BaseModel):
    subject: str = Field(min_length=1, max_length=500)
    customer_name: str = Field(min_length=1, max_length=200)
    customer_email: str = Field(min_length=3, max_length=255)
    customer_phone: str | None = None
    category: str | None = None
    priority: Priority = Priority.LOW
    product_model: str | None = None
    product_id: str | None = None


@router.post("", status_code=201)
async def create_ticket(
    body: CreateTicketRequest,
    background_tasks: BackgroundTasks,
    uc: CreateTicketUseCase = Depends(get_create_ticket_uc),
    session: AsyncSession = Depends(get_session),
    webhooks: WebhookPort = Depends(get_webhooks),
):
    """Create a ticket (and its customer if new) and try to auto-assign it."""
    try:
        result = await uc.execute(NewTicket(**body.model_dump()))
        await session.commit()
    except DuplicateIdentifierError as e:
        await session.rollback()
        raise HTTPException(status_code=409, detail=str(e))
    except IdentifierGenerationError as e:
        await session.rollback()
        logger.error("Ticket creation failed: %s", e)
        raise HTTPException(status_code=503, detail="Could not generate ticket identifier")

    background_tasks.add_task(publish_events, webhooks, result.events)

    return {
        "ticket": _serialize_ticket(result.ticket),
        "customer": _serialize_customer(result.customer),
        "customerCreated": result.customer_created,
        "assignmentResult": result.assignment.to_dict(),
    }


@router.get("/{ticket_id}")
async def get_ticket(ticket_id: str, repo: TicketRepository = Depends(get_ticket_repo)):
    ticket = await repo.get_by_id(ticket_id)
    if ticket is None:
        raise HTTPException(status_code=404, detail="Ticket not found")
    return _serialize_ticket(ticket)


@router.post("/{ticket_id}/assign")
async def assign_ticket(
    ticket_id: str,
    background_tasks: BackgroundTasks,
    uc: AssignTicketUseCase = Depends(get_assign_ticket_uc),
    session: AsyncSession = Depends(get_session),
    webhooks: WebhookPort = Depends(get_webhooks),
):
    """Run the assignment engine for an existing ticket."""
    try:
        result = await uc.execute(ticket_id)
    except TicketNotFoundError:
        raise HTTPException(status_code=404, detail="Ticket not found")
    await session.commit()
    background_tasks.add_task(publish_events, webhooks, result.events)
    return result.to_dict()


@router.get("/{ticket_id}/assignment-history")
async def assignment_history(
    ticket_id: str,
    repo: AssignmentHistoryRepository = Depends(get_history_repo),
):
    entries = await repo.list_for_conversation(ticket_id)
    return {
        "ticketId": ticket_id,
        "total": len(entries),
        "history": [_serialize_history(e) for e in entries],
    }


def _serialize_ticket(t: Ticket) -> dict:
    return {
        "id": t.id,
        "subject": t.subject,
        "customerId": t.customer_id,
        "category": t.category,
        "priority": t.priority.value,
        "status": t.status.value,
        "assigneeId": t.assignee_id,
        "productModel": t.product_model,
        "productId": t.product_id,
        "createdAt": t.created_at.isoformat() if t.created_at else None,
    }


def _serialize_customer(c: Customer) -> dict:
    return {"id": c.id, "name": c.name, "email": c.email, "phone": c.phone}


def _serialize_history(e: AssignmentHistoryEntry) -> dict:
    return {
        "id": e.id,
        "ruleId": e.rule_id,
        "ruleType": e.rule_type,
        "assignedToId": e.assigned_to_id,
        "assignedAt": e.assigned_at.isoformat() if e.assigned_at else None,
        "metadata": e.metadata,
    }
