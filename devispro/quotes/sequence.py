"""Redis-backed document sequence allocator.

One counter per number format and period, advanced with INCR so two
concurrent quotes never receive the same number:

    seq:DEVIS-:2026      -> 7    => "DEVIS-2026-007"
    seq:FACTURE/:202610  -> 42   => "FACTURE/202610/042"

Usage:
    from devispro.quotes.sequence import sequence_allocator

    number = await sequence_allocator.next_number(fmt, datetime.now(UTC))
"""

from __future__ import annotations

import logging
from datetime import datetime

from devispro.calculators.numbering import date_part, format_document_number
from devispro.config import settings
from devispro.db.engine import redis_client
from devispro.models.enums import DocumentKind
from devispro.schemas.calculators import NumberFormat

logger = logging.getLogger(__name__)


class SequenceUnavailableError(RuntimeError):
    """Raised when the sequence store cannot be reached."""


def number_format_for(kind: DocumentKind) -> NumberFormat:
    """Configured number format for quotes or invoices."""
    numbering = settings.numbering
    prefix = numbering.quote_prefix if kind == DocumentKind.QUOTE else numbering.invoice_prefix
    return NumberFormat(
        prefix=prefix,
        separator=numbering.separator,
        date_component=numbering.date_component,
        width=numbering.width,
    )


def sequence_key(number_format: NumberFormat, now: datetime) -> str:
    """Counter key. Changing prefix, separator or period starts a new counter."""
    period = date_part(number_format.date_component, now) or "all"
    return f"seq:{number_format.prefix}{number_format.separator.value}:{period}"


class SequenceAllocator:
    """Allocates consecutive sequence values backed by Redis INCR."""

    def __init__(self, redis: object) -> None:
        self._redis = redis

    async def next_sequence(self, number_format: NumberFormat, now: datetime) -> int:
        key = sequence_key(number_format, now)
        try:
            return int(await self._redis.incr(key))
        except Exception as e:
            logger.exception("Sequence store error for key %s", key)
            raise SequenceUnavailableError(f"cannot allocate sequence for {key}") from e

    async def next_number(self, number_format: NumberFormat, now: datetime) -> str:
        """Allocate the next sequence value and format it."""
        sequence = await self.next_sequence(number_format, now)
        number = format_document_number(number_format, sequence, now)
        logger.info("Allocated document number %s", number)
        return number

    async def restart_at(self, number_format: NumberFormat, now: datetime, next_sequence: int) -> None:
        """Make the next allocation for this format return ``next_sequence``."""
        if next_sequence < 1:
            raise ValueError(f"next_sequence must be >= 1, got {next_sequence}")
        key = sequence_key(number_format, now)
        try:
            await self._redis.set(key, next_sequence - 1)
        except Exception as e:
            logger.exception("Sequence store error for key %s", key)
            raise SequenceUnavailableError(f"cannot reset sequence for {key}") from e
        logger.info("Sequence %s restarted at %d", key, next_sequence)


# Module-level singleton
sequence_allocator = SequenceAllocator(redis_client)
