"""Webhook dispatchers — implement WebhookPort over HTTP."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import json
import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from helpdesk.application.ports.webhook_port import WebhookPort

logger = logging.getLogger(__name__)

USER_AGENT = "HelpDesk-Webhook/1.0"
MAX_BACKOFF_SECONDS = 10.0


class HttpxWebhookDispatcher(WebhookPort):
    """POST each event to every configured URL, with signed bodies and retries."""

    def __init__(
        self,
        urls: list[str],
        secret: str = "",
        timeout: float = 30.0,
        max_attempts: int = 3,
        backoff_base: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._urls = list(urls)
        self._secret = secret
        self._timeout = timeout
        self._max_attempts = max(1, max_attempts)
        self._backoff_base = backoff_base
        self._transport = transport

    async def trigger(self, event: str, payload: dict[str, Any]) -> tuple[int, int]:
        if not self._urls:
            return 0, 0

        body = json.dumps(
            {
                "event": event,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "data": payload,
            },
            default=str,
        )
        headers = {"Content-Type": "application/json", "User-Agent": USER_AGENT}
        if self._secret:
            digest = hmac.new(self._secret.encode(), body.encode(), hashlib.sha256).hexdigest()
            headers["X-Webhook-Signature"] = f"sha256={digest}"

        sent = failed = 0
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                for url in self._urls:
                    if await self._deliver(client, url, event, body, headers):
                        sent += 1
                    else:
                        failed += 1
        except Exception:
            logger.exception("Webhook dispatch for '%s' aborted", event)
            failed = len(self._urls) - sent

        logger.info("Webhook '%s': %d sent, %d failed", event, sent, failed)
        return sent, failed

    async def _deliver(
        self,
        client: httpx.AsyncClient,
        url: str,
        event: str,
        body: str,
        headers: dict[str, str],
    ) -> bool:
        for attempt in range(1, self._max_attempts + 1):
            try:
                response = await client.post(url, content=body, headers=headers)
                response.raise_for_status()
                return True
            except httpx.HTTPError as e:
                logger.warning(
                    "Webhook '%s' to %s failed (attempt %d/%d): %s",
                    event, url, attempt, self._max_attempts, e,
                )
            if attempt < self._max_attempts:
                await asyncio.sleep(self._backoff(attempt))
        return False

    def _backoff(self, attempt: int) -> float:
        # 1s, 2s, 4s ... capped
        return min(self._backoff_base * 2 ** (attempt - 1), MAX_BACKOFF_SECONDS)


class NullWebhookDispatcher(WebhookPort):
    """Used when no webhook URLs are configured."""

    async def trigger(self, event: str, payload: dict[str, Any]) -> tuple[int, int]:
        return 0, 0
