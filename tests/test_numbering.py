"""Tests for the document number formatter and parser."""

from __future__ import annotations

from datetime import datetime

import pytest

from devispro.calculators.numbering import format_document_number, parse_document_number
from devispro.models.enums import DateComponent, NumberSeparator
from devispro.schemas.calculators import NumberFormat

NOW = datetime(2026, 10, 19, 9, 30)


class TestFormatDocumentNumber:
    def test_default_format(self) -> None:
        fmt = NumberFormat(prefix="DEVIS")
        assert format_document_number(fmt, 7, NOW) == "DEVIS-2026-007"

    def test_year_month_with_slash(self) -> None:
        fmt = NumberFormat(
            prefix="FACTURE",
            separator=NumberSeparator.SLASH,
            date_component=DateComponent.YEAR_MONTH,
            width=4,
        )
        assert format_document_number(fmt, 42, NOW) == "FACTURE/202610/0042"

    def test_no_separator_no_date(self) -> None:
        fmt = NumberFormat(prefix="D", separator=NumberSeparator.NONE, date_component=DateComponent.NONE)
        assert format_document_number(fmt, 5, NOW) == "D005"

    def test_no_prefix(self) -> None:
        fmt = NumberFormat(prefix="", date_component=DateComponent.YEAR)
        assert format_document_number(fmt, 1, NOW) == "2026-001"

    def test_sequence_wider_than_width_is_not_truncated(self) -> None:
        fmt = NumberFormat(prefix="DEVIS", date_component=DateComponent.NONE, width=3)
        assert format_document_number(fmt, 12345, NOW) == "DEVIS-12345"

    def test_negative_sequence_raises(self) -> None:
        with pytest.raises(ValueError):
            format_document_number(NumberFormat(), -1, NOW)

    def test_width_bounds(self) -> None:
        with pytest.raises(ValueError):
            NumberFormat(width=2)
        with pytest.raises(ValueError):
            NumberFormat(width=7)


class TestParseDocumentNumber:
    def test_year_format(self) -> None:
        parsed = parse_document_number("DEVIS-2026-007")
        assert parsed.sequence == 7
        assert parsed.number_format.prefix == "DEVIS"
        assert parsed.number_format.separator == NumberSeparator.DASH
        assert parsed.number_format.date_component == DateComponent.YEAR
        assert parsed.number_format.width == 3

    def test_year_month_format(self) -> None:
        parsed = parse_document_number("FACTURE/202610/0042")
        assert parsed.number_format.date_component == DateComponent.YEAR_MONTH
        assert parsed.number_format.separator == NumberSeparator.SLASH
        assert parsed.number_format.width == 4
        assert parsed.sequence == 42

    def test_unseparated(self) -> None:
        parsed = parse_document_number("DEVIS0012")
        assert parsed.number_format.prefix == "DEVIS"
        assert parsed.number_format.separator == NumberSeparator.NONE
        assert parsed.number_format.date_component == DateComponent.NONE
        assert parsed.sequence == 12

    def test_prefix_without_date(self) -> None:
        parsed = parse_document_number("DEVIS-015")
        assert parsed.number_format.prefix == "DEVIS"
        assert parsed.number_format.date_component == DateComponent.NONE

    def test_short_sequence_width_is_clamped(self) -> None:
        assert parse_document_number("D-7").number_format.width == 3

    def test_round_trip_of_formatted_number(self) -> None:
        fmt = NumberFormat(prefix="DV", separator=NumberSeparator.SLASH, date_component=DateComponent.YEAR, width=5)
        parsed = parse_document_number(format_document_number(fmt, 321, NOW))
        assert parsed.number_format == fmt
        assert parsed.sequence == 321

    def test_no_sequence_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_document_number("DEVIS-ABC")
        with pytest.raises(ValueError):
            parse_document_number("DEVIS")
