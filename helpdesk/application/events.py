"""Outbound events collected by use cases and published after commit."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from helpdesk.application.ports.webhook_port import WebhookPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WebhookEvent:
    name: str  # e.g. "ticket.created"
    payload: dict[str, Any] = field(default_factory=dict)


async def publish_events(webhooks: WebhookPort, events: Iterable[WebhookEvent]) -> None:
    """Deliver events in order. Only call this after the transaction commits."""
    for event in events:
        sent, failed = await webhooks.trigger(event.name, event.payload)
        if failed:
            logger.warning("Event %s: %d delivered, %d failed", event.name, sent, failed)
        else:
            logger.debug("Event %s delivered to %d endpoint(s)", event.name, sent)
