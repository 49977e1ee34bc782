"""Tests for HttpxWebhookDispatcher — uses httpx.MockTransport (no network)."""

import hashlib
import hmac
import json

import httpx
import pytest

from helpdesk.adapters.webhooks.httpx_dispatcher import (
    HttpxWebhookDispatcher,
    NullWebhookDispatcher,
)


class Recorder:
    """MockTransport handler answering with queued status codes per URL."""

    def __init__(self, statuses: dict[str, list[int]] | None = None):
        self.requests: list[httpx.Request] = []
        self._statuses = statuses or {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._statuses.get(str(request.url), [])
        return httpx.Response(queue.pop(0) if queue else 200)


def _dispatcher(recorder, urls, **kwargs) -> HttpxWebhookDispatcher:
    return HttpxWebhookDispatcher(
        urls=urls,
        backoff_base=0,
        transport=httpx.MockTransport(recorder),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_posts_event_envelope_to_every_url():
    recorder = Recorder()
    dispatcher = _dispatcher(recorder, ["https://a.example/hook", "https://b.example/hook"])

    sent, failed = await dispatcher.trigger("ticket.created", {"ticket": {"id": "TKT-2501-001"}})

    assert (sent, failed) == (2, 0)
    assert [str(r.url) for r in recorder.requests] == [
        "https://a.example/hook",
        "https://b.example/hook",
    ]
    body = json.loads(recorder.requests[0].content)
    assert body["event"] == "ticket.created"
    assert body["data"] == {"ticket": {"id": "TKT-2501-001"}}
    assert "timestamp" in body
    assert recorder.requests[0].headers["User-Agent"] == "HelpDesk-Webhook/1.0"
    assert "X-Webhook-Signature" not in recorder.requests[0].headers


@pytest.mark.asyncio
async def test_signs_body_when_secret_configured():
    recorder = Recorder()
    dispatcher = _dispatcher(recorder, ["https://a.example/hook"], secret="s3cret")

    await dispatcher.trigger("ticket.assigned", {"ticketId": "TKT-2501-001"})

    request = recorder.requests[0]
    expected = hmac.new(b"s3cret", request.content, hashlib.sha256).hexdigest()
    assert request.headers["X-Webhook-Signature"] == f"sha256={expected}"


@pytest.mark.asyncio
async def test_retries_until_success():
    url = "https://a.example/hook"
    recorder = Recorder({url: [500, 502, 200]})
    dispatcher = _dispatcher(recorder, [url], max_attempts=3)

    assert await dispatcher.trigger("ticket.created", {}) == (1, 0)
    assert len(recorder.requests) == 3


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts():
    url = "https://a.example/hook"
    recorder = Recorder({url: [500, 500, 500, 500]})
    dispatcher = _dispatcher(recorder, [url, "https://ok.example/hook"], max_attempts=2)

    assert await dispatcher.trigger("ticket.created", {}) == (1, 1)
    assert len([r for r in recorder.requests if str(r.url) == url]) == 2


@pytest.mark.asyncio
async def test_transport_errors_never_raise():
    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    dispatcher = HttpxWebhookDispatcher(
        urls=["https://down.example/hook"],
        max_attempts=2,
        backoff_base=0,
        transport=httpx.MockTransport(refuse),
    )
    assert await dispatcher.trigger("ticket.created", {}) == (0, 1)


@pytest.mark.asyncio
async def test_no_urls_is_noop():
    recorder = Recorder()
    assert await _dispatcher(recorder, []).trigger("ticket.created", {}) == (0, 0)
    assert recorder.requests == []


def test_backoff_doubles_and_caps():
    dispatcher = HttpxWebhookDispatcher(urls=["https://a.example"])
    assert [dispatcher._backoff(n) for n in (1, 2, 3, 4, 5)] == [1, 2, 4, 8, 10]


@pytest.mark.asyncio
async def test_null_dispatcher():
    assert await NullWebhookDispatcher().trigger("ticket.created", {"x": 1}) == (0, 0)
