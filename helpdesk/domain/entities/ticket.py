"""Ticket entity — a customer support conversation."""

from dataclasses import dataclass
from datetime import datetime

from helpdesk.domain.value_objects.enums import Priority, TicketStatus


@dataclass
class Ticket:
    id: str  # TKT-YYMM-SEQ
    subject: str
    customer_id: str
    category: str | None = None
    priority: Priority = Priority.LOW
    status: TicketStatus = TicketStatus.OPEN
    assignee_id: int | None = None
    product_model: str | None = None
    product_id: str | None = None
    created_at: datetime | None = None

    def is_assigned(self) -> bool:
        return self.assignee_id is not None

    def routing_category(self, default: str) -> str:
        """Category used as department / skill tag, with the fallback tag."""
        return (self.category or "").strip() or default
