"""Agent entity — a support staff member who can be assigned tickets."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime

from helpdesk.domain.value_objects.enums import PresenceStatus

logger = logging.getLogger(__name__)


@dataclass
class Agent:
    id: int | None
    name: str
    department: str | None = None
    skills: set[str] = field(default_factory=set)
    is_active: bool = True
    presence: PresenceStatus = PresenceStatus.ONLINE
    max_load: int | None = None  # None = unbounded
    current_load: int = 0  # derived from open/pending tickets, never stored
    created_at: datetime | None = None

    def has_skill(self, skill: str) -> bool:
        return skill in self.skills

    def effective_max_load(self, default: int | None = None) -> int | None:
        return self.max_load if self.max_load is not None else default

    def is_under_capacity(self, default_max_load: int | None = None) -> bool:
        cap = self.effective_max_load(default_max_load)
        return cap is None or self.current_load < cap


def parse_skills(raw: object) -> set[str]:
    """Parse stored skills into a set of tags.

    Accepts a list, a JSON array string (``'["Billing", "Technical"]'``) or a
    plain separated string (``'Billing, Technical'``). Anything else is
    treated as "no skills" so one bad record cannot break a routing pass.
    """
    if raw is None or raw == "":
        return set()
    if isinstance(raw, (list, tuple, set, frozenset)):
        return {str(s).strip() for s in raw if str(s).strip()}
    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith("["):
            try:
                parsed = json.loads(text)
            except ValueError:
                logger.warning("Malformed skills JSON %r, treating as no skills", raw)
                return set()
            return parse_skills(parsed) if isinstance(parsed, list) else set()
        return {p.strip() for p in re.split(r"[,;]+", text) if p.strip()}
    logger.warning("Unsupported skills value %r, treating as no skills", raw)
    return set()


def parse_presence(raw: object) -> PresenceStatus:
    """Stored presence as a status; unknown values count as offline."""
    try:
        return PresenceStatus(str(raw).strip().lower())
    except ValueError:
        logger.warning("Unknown presence status %r, treating as offline", raw)
        return PresenceStatus.OFFLINE
