"""Assignment ledger entries and audit activity records."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from helpdesk.domain.value_objects.enums import ActivityType


@dataclass
class AssignmentHistoryEntry:
    """One append-only ledger row; round-robin recovers its rotation from these."""

    id: int | None
    rule_id: int | None
    rule_type: str
    conversation_id: str
    assigned_to_id: int
    assigned_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class TicketActivity:
    id: int | None
    conversation_id: str
    activity_type: ActivityType
    new_value: str | None = None
    performed_by: str = "system"
    performed_by_name: str | None = None
    created_at: datetime | None = None
