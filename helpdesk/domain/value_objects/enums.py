"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class TicketStatus(str, Enum):
    OPEN = "open"
    PENDING = "pending"
    RESOLVED = "resolved"
    CLOSED = "closed"


# Statuses that count towards an agent's current load
ACTIVE_STATUSES: frozenset[TicketStatus] = frozenset({TicketStatus.OPEN, TicketStatus.PENDING})


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RuleType(str, Enum):
    ROUND_ROBIN = "round_robin"
    LOAD_BASED = "load_based"
    DEPARTMENT_MATCH = "department_match"
    SKILL_MATCH = "skill_match"
    DIRECT_ASSIGNMENT = "direct_assignment"
    # Top-priority manual rule parks new tickets in the unassigned queue
    MANUAL = "manual"


class PresenceStatus(str, Enum):
    ONLINE = "online"
    AWAY = "away"
    OFFLINE = "offline"


class ActivityType(str, Enum):
    ASSIGNED = "assigned"


class SequenceScope(str, Enum):
    TICKET = "ticket"
    CUSTOMER = "customer"
