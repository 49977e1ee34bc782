"""Port interface for outbound event webhooks."""

from abc import ABC, abstractmethod
from typing import Any


class WebhookPort(ABC):
    @abstractmethod
    async def trigger(self, event: str, payload: dict[str, Any]) -> tuple[int, int]:
        """Deliver *event* to every subscriber.

        Returns (sent, failed). Must not raise: delivery is best-effort.
        """
        ...
