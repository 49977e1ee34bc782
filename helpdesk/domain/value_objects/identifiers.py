"""Human-readable identifiers for tickets and customers.

Formats:
  ticket    TKT-<YYMM>-<SEQ>              e.g. TKT-2501-003
  customer  CUST-<YYMM>-<CAT>-<PROD>-<SEQ>  e.g. CUST-2411-WZ-PRO-001

The sequence is unique within its partition (the identifier prefix) and is
zero-padded to at least three digits.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime

TICKET_PREFIX = "TKT"
CUSTOMER_PREFIX = "CUST"
SEQUENCE_WIDTH = 3

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


@dataclass(frozen=True)
class IdentifierCodes:
    """Category-to-code table plus the fallback code for unknown values."""

    category_codes: dict[str, str] = field(default_factory=dict)
    fallback: str = "GEN"

    def category_code(self, category: str | None) -> str:
        """Look up the category code, case-insensitively."""
        if not category:
            return self.fallback
        wanted = category.strip().upper()
        for name, code in self.category_codes.items():
            if name.upper() == wanted:
                return code
        return self.fallback

    def product_code(self, product_model: str | None) -> str:
        """First three alphanumerics of the product model, uppercased."""
        if not product_model:
            return self.fallback
        cleaned = _NON_ALNUM.sub("", product_model).upper()
        return cleaned[:3] or self.fallback


def year_month(now: datetime) -> str:
    return f"{now.year % 100:02d}{now.month:02d}"


def format_sequence(sequence: int) -> str:
    return str(sequence).zfill(SEQUENCE_WIDTH)


def ticket_prefix(now: datetime) -> str:
    return f"{TICKET_PREFIX}-{year_month(now)}-"


def customer_prefix(now: datetime, category_code: str, product_code: str) -> str:
    return f"{CUSTOMER_PREFIX}-{year_month(now)}-{category_code}-{product_code}-"


def parse_sequence(identifier: str) -> int:
    """Numeric value of the last dash segment.

    Legacy ticket ids (TKT-YYMM-CAT-PRI-SEQ) carry extra segments, so only the
    trailing one is read. Non-numeric tails count as 0.
    """
    tail = identifier.rsplit("-", 1)[-1]
    return int(tail) if tail.isdigit() else 0


def max_sequence(identifiers: list[str]) -> int:
    return max((parse_sequence(i) for i in identifiers), default=0)
