"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.adapters.persistence.database import get_session
from helpdesk.adapters.persistence.repositories import (
    SqlActivityRepository,
    SqlAgentRepository,
    SqlAssignmentHistoryRepository,
    SqlCustomerRepository,
    SqlRuleRepository,
    SqlSequenceRepository,
    SqlTicketRepository,
    SqlTransactionManager,
)
from helpdesk.adapters.webhooks.httpx_dispatcher import (
    HttpxWebhookDispatcher,
    NullWebhookDispatcher,
)
from helpdesk.application.ports.webhook_port import WebhookPort
from helpdesk.application.use_cases.assign_ticket import (
    AssignTicketUseCase,
    PreviewAssignmentUseCase,
    RuleEvaluator,
)
from helpdesk.application.use_cases.create_ticket import CreateTicketUseCase
from helpdesk.application.use_cases.identity_builder import IdentityBuilder
from helpdesk.application.use_cases.manage_rules import ManageRulesUseCase
from helpdesk.config import settings
from helpdesk.domain.value_objects.identifiers import IdentifierCodes

logger = logging.getLogger(__name__)

# Singleton adapters
_identifier_codes = IdentifierCodes(settings.category_codes, settings.fallback_code)

_webhooks: WebhookPort
if settings.webhook_urls:
    _webhooks = HttpxWebhookDispatcher(
        urls=settings.webhook_urls,
        secret=settings.webhook_secret,
        timeout=settings.webhook_timeout_seconds,
        max_attempts=settings.webhook_max_attempts,
    )
    logger.info("Webhooks enabled for %d endpoint(s)", len(settings.webhook_urls))
else:
    _webhooks = NullWebhookDispatcher()


def get_webhooks() -> WebhookPort:
    return _webhooks


def get_ticket_repo(session: AsyncSession = Depends(get_session)) -> SqlTicketRepository:
    return SqlTicketRepository(session)


def get_history_repo(
    session: AsyncSession = Depends(get_session),
) -> SqlAssignmentHistoryRepository:
    return SqlAssignmentHistoryRepository(session)


def get_rule_evaluator(session: AsyncSession = Depends(get_session)) -> RuleEvaluator:
    return RuleEvaluator(
        agent_repo=SqlAgentRepository(session),
        rule_repo=SqlRuleRepository(session),
        history_repo=SqlAssignmentHistoryRepository(session),
        default_category=settings.default_category,
        require_online=settings.require_online_presence,
        customer_repo=SqlCustomerRepository(session),
    )


def get_assign_ticket_uc(
    session: AsyncSession = Depends(get_session),
    evaluator: RuleEvaluator = Depends(get_rule_evaluator),
) -> AssignTicketUseCase:
    return AssignTicketUseCase(
        ticket_repo=SqlTicketRepository(session),
        evaluator=evaluator,
        history_repo=SqlAssignmentHistoryRepository(session),
        activity_repo=SqlActivityRepository(session),
        sequence_repo=SqlSequenceRepository(session),
        transactions=SqlTransactionManager(session),
    )


def get_preview_assignment_uc(
    session: AsyncSession = Depends(get_session),
    evaluator: RuleEvaluator = Depends(get_rule_evaluator),
) -> PreviewAssignmentUseCase:
    return PreviewAssignmentUseCase(ticket_repo=SqlTicketRepository(session), evaluator=evaluator)


def get_create_ticket_uc(
    session: AsyncSession = Depends(get_session),
    assign_uc: AssignTicketUseCase = Depends(get_assign_ticket_uc),
) -> CreateTicketUseCase:
    return CreateTicketUseCase(
        ticket_repo=SqlTicketRepository(session),
        customer_repo=SqlCustomerRepository(session),
        identities=IdentityBuilder(SqlSequenceRepository(session), _identifier_codes),
        assign_ticket=assign_uc,
        transactions=SqlTransactionManager(session),
        default_category=settings.default_category,
    )


def get_manage_rules_uc(session: AsyncSession = Depends(get_session)) -> ManageRulesUseCase:
    return ManageRulesUseCase(SqlRuleRepository(session))
