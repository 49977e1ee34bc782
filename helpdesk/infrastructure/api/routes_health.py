"""Health check: database connectivity and whether auto-assignment is live."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.adapters.persistence.database import get_session
from helpdesk.adapters.persistence.models import AssignmentRuleModel
from helpdesk.domain.value_objects.enums import RuleType

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(session: AsyncSession = Depends(get_session)):
    """Report database status and the routing mode new tickets will see.

    routing is "auto" when enabled rules exist, "manual" when the first of
    them is a manual rule, and "off" with no enabled rules.
    """
    try:
        rule_types = (
            await session.scalars(
                select(AssignmentRuleModel.rule_type)
                .where(AssignmentRuleModel.enabled.is_(True))
                .order_by(
                    AssignmentRuleModel.priority,
                    AssignmentRuleModel.created_at,
                    AssignmentRuleModel.id,
                )
            )
        ).all()
    except Exception as e:
        logger.warning("Health check could not reach the database: %s", e)
        return {
            "status": "degraded",
            "database": f"error: {e}",
            "enabledRules": None,
            "routing": None,
        }

    if not rule_types:
        routing = "off"
    elif rule_types[0] == RuleType.MANUAL.value:
        routing = "manual"
    else:
        routing = "auto"

    return {
        "status": "ok",
        "database": "connected",
        "enabledRules": len(rule_types),
        "routing": routing,
    }
