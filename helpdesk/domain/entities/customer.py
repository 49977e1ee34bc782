"""Customer entity — the person who raised a ticket."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Customer:
    id: str  # CUST-YYMM-CAT-PROD-SEQ
    name: str
    email: str
    phone: str | None = None
    created_at: datetime | None = None
