"""Application error taxonomy.

No-op routing outcomes (already assigned, empty roster, no rules) are
reported through AssignmentResult, not raised.
"""


class HelpdeskError(Exception):
    pass


class TicketNotFoundError(HelpdeskError):
    def __init__(self, ticket_id: str):
        super().__init__(f"Ticket not found: {ticket_id}")
        self.ticket_id = ticket_id


class RuleNotFoundError(HelpdeskError):
    def __init__(self, rule_id: int):
        super().__init__(f"Assignment rule not found: {rule_id}")
        self.rule_id = rule_id


class InvalidRuleError(HelpdeskError):
    pass


class IdentifierGenerationError(HelpdeskError):
    """The sequence store failed; the ticket cannot be created without an id."""


class DuplicateIdentifierError(HelpdeskError):
    """A minted identifier collided with an existing row; retry the creation."""

    def __init__(self, identifier: str):
        super().__init__(f"Identifier already exists: {identifier}")
        self.identifier = identifier
