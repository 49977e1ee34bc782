"""Assignment rule endpoints — admin CRUD and dry-run preview."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.adapters.persistence.database import get_session
from helpdesk.application.errors import (
    InvalidRuleError,
    RuleNotFoundError,
    TicketNotFoundError,
)
from helpdesk.application.use_cases.assign_ticket import PreviewAssignmentUseCase
from helpdesk.application.use_cases.manage_rules import ManageRulesUseCase
from helpdesk.domain.entities.assignment_rule import AssignmentRule
from helpdesk.infrastructure.api.dependencies import (
    get_manage_rules_uc,
    get_preview_assignment_uc,
)

router = APIRouter(prefix="/assignment-rules", tags=["assignment-rules"])

# PATCH may clear these with an explicit null
NULLABLE_FIELDS = ("config", "description")


class CreateRuleRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    rule_type: str
    priority: int = 0
    enabled: bool = True
    # Object or JSON text; malformed values are stored as {}
    config: dict[str, Any] | str | None = None
    description: str | None = None


class UpdateRuleRequest(BaseModel):
    name: str | None = None
    rule_type: str | None = None
    priority: int | None = None
    enabled: bool | None = None
    config: dict[str, Any] | str | None = None
    description: str | None = None


@router.get("")
async def list_rules(uc: ManageRulesUseCase = Depends(get_manage_rules_uc)):
    rules = await uc.list_rules()
    return {"total": len(rules), "rules": [_serialize_rule(r) for r in rules]}


@router.post("", status_code=201)
async def create_rule(
    body: CreateRuleRequest,
    uc: ManageRulesUseCase = Depends(get_manage_rules_uc),
    session: AsyncSession = Depends(get_session),
):
    try:
        rule = await uc.create_rule(**body.model_dump())
    except InvalidRuleError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await session.commit()
    return _serialize_rule(rule)


@router.get("/{rule_id}")
async def get_rule(rule_id: int, uc: ManageRulesUseCase = Depends(get_manage_rules_uc)):
    try:
        rule = await uc.get_rule(rule_id)
    except RuleNotFoundError:
        raise HTTPException(status_code=404, detail="Assignment rule not found")
    return _serialize_rule(rule)


@router.patch("/{rule_id}")
async def update_rule(
    rule_id: int,
    body: UpdateRuleRequest,
    uc: ManageRulesUseCase = Depends(get_manage_rules_uc),
    session: AsyncSession = Depends(get_session),
):
    try:
        changes = {
            k: v
            for k, v in body.model_dump(exclude_unset=True).items()
            if v is not None or k in NULLABLE_FIELDS
        }
        rule = await uc.update_rule(rule_id, changes)
    except RuleNotFoundError:
        raise HTTPException(status_code=404, detail="Assignment rule not found")
    except InvalidRuleError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await session.commit()
    return _serialize_rule(rule)


@router.delete("/{rule_id}")
async def delete_rule(
    rule_id: int,
    uc: ManageRulesUseCase = Depends(get_manage_rules_uc),
    session: AsyncSession = Depends(get_session),
):
    try:
        await uc.delete_rule(rule_id)
    except RuleNotFoundError:
        raise HTTPException(status_code=404, detail="Assignment rule not found")
    await session.commit()
    return {"status": "deleted", "id": rule_id}


@router.post("/preview/{ticket_id}")
async def preview_assignment(
    ticket_id: str,
    uc: PreviewAssignmentUseCase = Depends(get_preview_assignment_uc),
):
    """Show which agent each enabled rule would pick, without assigning."""
    try:
        preview = await uc.execute(ticket_id)
    except TicketNotFoundError:
        raise HTTPException(status_code=404, detail="Ticket not found")
    return preview.to_dict()


def _serialize_rule(r: AssignmentRule) -> dict:
    return {
        "id": r.id,
        "name": r.name,
        "ruleType": r.rule_type,
        "priority": r.priority,
        "enabled": r.enabled,
        "config": r.config,
        "description": r.description,
        "createdAt": r.created_at.isoformat() if r.created_at else None,
    }
