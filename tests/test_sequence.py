"""Tests for the Redis-backed document sequence allocator."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from devispro.models.enums import DateComponent, DocumentKind, NumberSeparator
from devispro.quotes.sequence import (
    SequenceAllocator,
    SequenceUnavailableError,
    number_format_for,
    sequence_key,
)
from devispro.schemas.calculators import NumberFormat

NOW = datetime(2026, 10, 19)


def _make_redis(value: int = 1) -> AsyncMock:
    redis = AsyncMock()
    redis.incr = AsyncMock(return_value=value)
    redis.set = AsyncMock()
    return redis


class TestSequenceKey:
    def test_key_per_prefix_and_year(self):
        assert sequence_key(NumberFormat(prefix="DEVIS"), NOW) == "seq:DEVIS-:2026"

    def test_year_month(self):
        fmt = NumberFormat(prefix="F", separator=NumberSeparator.SLASH, date_component=DateComponent.YEAR_MONTH)
        assert sequence_key(fmt, NOW) == "seq:F/:202610"

    def test_undated(self):
        fmt = NumberFormat(prefix="D", date_component=DateComponent.NONE)
        assert sequence_key(fmt, NOW) == "seq:D-:all"


class TestNumberFormatFor:
    def test_quote_and_invoice_prefixes(self):
        assert number_format_for(DocumentKind.QUOTE).prefix == "DEVIS"
        assert number_format_for(DocumentKind.INVOICE).prefix == "FACTURE"


class TestSequenceAllocator:
    @pytest.mark.asyncio()
    async def test_next_number(self):
        redis = _make_redis(7)
        allocator = SequenceAllocator(redis)

        number = await allocator.next_number(NumberFormat(prefix="DEVIS"), NOW)

        assert number == "DEVIS-2026-007"
        redis.incr.assert_awaited_once_with("seq:DEVIS-:2026")

    @pytest.mark.asyncio()
    async def test_redis_failure_raises(self):
        redis = _make_redis()
        redis.incr = AsyncMock(side_effect=ConnectionError("down"))
        allocator = SequenceAllocator(redis)

        with pytest.raises(SequenceUnavailableError):
            await allocator.next_number(NumberFormat(prefix="DEVIS"), NOW)

    @pytest.mark.asyncio()
    async def test_restart_at(self):
        redis = _make_redis()
        allocator = SequenceAllocator(redis)

        await allocator.restart_at(NumberFormat(prefix="DEVIS"), NOW, 50)

        redis.set.assert_awaited_once_with("seq:DEVIS-:2026", 49)

    @pytest.mark.asyncio()
    async def test_restart_below_one_rejected(self):
        with pytest.raises(ValueError):
            await SequenceAllocator(_make_redis()).restart_at(NumberFormat(), NOW, 0)
