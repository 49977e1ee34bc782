"""IdentityBuilder — mint ticket and customer identifiers from atomic counters."""

from __future__ import annotations

import logging
from datetime import datetime

from helpdesk.application.errors import IdentifierGenerationError
from helpdesk.application.ports.sequence_repo import SequenceRepository
from helpdesk.domain.value_objects.enums import SequenceScope
from helpdesk.domain.value_objects.identifiers import (
    IdentifierCodes,
    customer_prefix,
    format_sequence,
    ticket_prefix,
)

logger = logging.getLogger(__name__)


class IdentityBuilder:
    """Combines partition prefixes with the next counter value.

    Each call is a single atomic increment on the partition's counter row, so
    two concurrent creations in one partition always receive distinct ids.
    """

    def __init__(self, sequences: SequenceRepository, codes: IdentifierCodes):
        self._sequences = sequences
        self._codes = codes

    async def next_ticket_id(
        self, category: str | None, priority: str | None, now: datetime
    ) -> str:
        """TKT-YYMM-SEQ.

        category and priority are accepted for callers that still pass them;
        they no longer appear in the identifier.
        """
        prefix = ticket_prefix(now)
        sequence = await self._next(SequenceScope.TICKET, prefix)
        ticket_id = f"{prefix}{format_sequence(sequence)}"
        logger.info("Minted ticket id %s", ticket_id)
        return ticket_id

    async def next_customer_id(
        self, category: str | None, product_model: str | None, now: datetime
    ) -> str:
        """CUST-YYMM-CAT-PROD-SEQ."""
        prefix = customer_prefix(
            now,
            self._codes.category_code(category),
            self._codes.product_code(product_model),
        )
        sequence = await self._next(SequenceScope.CUSTOMER, prefix)
        customer_id = f"{prefix}{format_sequence(sequence)}"
        logger.info("Minted customer id %s", customer_id)
        return customer_id

    async def _next(self, scope: SequenceScope, prefix: str) -> int:
        try:
            return await self._sequences.next_value(scope, prefix)
        except Exception as e:
            logger.exception("Sequence generation failed for %s", prefix)
            raise IdentifierGenerationError(f"Cannot allocate sequence for {prefix}") from e
