"""Document number formatter for quotes and invoices.

Numbers are assembled from a prefix, a separator, an optional date part and a
zero-padded sequence: "DEVIS-2026-007", "FACTURE/202610/0042", "DEVIS007".

Pure functions. Sequence allocation lives in quotes.sequence.
"""

from __future__ import annotations

import re
from datetime import datetime

from devispro.models.enums import DateComponent, NumberSeparator
from devispro.schemas.calculators import NumberFormat, ParsedNumber

_SEPARATOR_RE = re.compile(r"[-/]")
_UNSEPARATED_RE = re.compile(r"^(?P<prefix>.*?)(?P<sequence>\d+)$")
_YEAR_RE = re.compile(r"^\d{4}$")
_YEAR_MONTH_RE = re.compile(r"^\d{6}$")


def date_part(component: DateComponent, now: datetime) -> str:
    """Date text embedded in a number: "", "2026" or "202610"."""
    if component == DateComponent.YEAR:
        return f"{now.year:04d}"
    if component == DateComponent.YEAR_MONTH:
        return f"{now.year:04d}{now.month:02d}"
    return ""


def format_document_number(number_format: NumberFormat, sequence: int, now: datetime) -> str:
    """Build the display number for the given sequence value.

    The separator goes after the prefix (when there is one) and between the
    date part and the sequence. Sequences wider than the configured width
    are written in full, never truncated.

    Raises:
        ValueError: If sequence is negative.
    """
    if sequence < 0:
        raise ValueError(f"sequence must be >= 0, got {sequence}")

    separator = number_format.separator.value
    parts: list[str] = []
    if number_format.prefix:
        parts.append(number_format.prefix)
    dated = date_part(number_format.date_component, now)
    if dated:
        parts.append(dated)
    parts.append(str(sequence).zfill(number_format.width))
    return separator.join(parts)


def parse_document_number(text: str) -> ParsedNumber:
    """Recover the format and sequence of an existing number.

    Used to pre-fill the numbering dialog from the last issued number.
    A 4-digit middle part is read as a year and a 6-digit one as
    year+month. The width is the sequence's digit count, clamped to 3–6.

    Raises:
        ValueError: If no trailing sequence number can be found.
    """
    text = text.strip()
    match = _SEPARATOR_RE.search(text)

    if match is None:
        found = _UNSEPARATED_RE.match(text)
        if found is None:
            raise ValueError(f"no sequence number in {text!r}")
        return _parsed(found.group("prefix"), NumberSeparator.NONE, DateComponent.NONE, found.group("sequence"))

    separator = NumberSeparator(match.group(0))
    parts = _SEPARATOR_RE.split(text)
    sequence = parts[-1]
    if not sequence.isdigit():
        raise ValueError(f"no sequence number in {text!r}")

    component = DateComponent.NONE
    if len(parts) >= 3:
        if _YEAR_RE.match(parts[-2]):
            component = DateComponent.YEAR
        elif _YEAR_MONTH_RE.match(parts[-2]):
            component = DateComponent.YEAR_MONTH

    prefix_parts = parts[:-2] if component != DateComponent.NONE else parts[:-1]
    return _parsed(separator.value.join(prefix_parts), separator, component, sequence)


def _parsed(prefix: str, separator: NumberSeparator, component: DateComponent, digits: str) -> ParsedNumber:
    width = min(max(len(digits), 3), 6)
    return ParsedNumber(
        number_format=NumberFormat(
            prefix=prefix,
            separator=separator,
            date_component=component,
            width=width,
        ),
        sequence=int(digits),
    )
