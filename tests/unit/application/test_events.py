"""Tests for publishing queued webhook events."""

import logging

import pytest

from helpdesk.application.events import WebhookEvent, publish_events
from routing_fakes import RecordingWebhooks


class UnreachableWebhooks(RecordingWebhooks):
    async def trigger(self, event, payload):
        await super().trigger(event, payload)
        return 0, 2


@pytest.mark.asyncio
async def test_events_published_in_order():
    webhooks = RecordingWebhooks()
    await publish_events(
        webhooks,
        [
            WebhookEvent("customer.created", {"customer": {"id": "CUST-2501-WZ-GEN-001"}}),
            WebhookEvent("ticket.created", {"ticket": {"id": "TKT-2501-001"}}),
        ],
    )

    assert webhooks.events == [
        ("customer.created", {"customer": {"id": "CUST-2501-WZ-GEN-001"}}),
        ("ticket.created", {"ticket": {"id": "TKT-2501-001"}}),
    ]


@pytest.mark.asyncio
async def test_failed_deliveries_are_logged_not_raised(caplog):
    webhooks = UnreachableWebhooks()
    with caplog.at_level(logging.WARNING, logger="helpdesk.application.events"):
        await publish_events(webhooks, [WebhookEvent("ticket.assigned")])

    assert webhooks.names() == ["ticket.assigned"]
    assert "0 delivered, 2 failed" in caplog.text


@pytest.mark.asyncio
async def test_nothing_to_publish():
    webhooks = RecordingWebhooks()
    await publish_events(webhooks, [])
    assert webhooks.events == []
