"""Line-item hierarchy — sections and subsections inferred from row order.

A quote's content is a flat list. There are no parent pointers: a row belongs
to the nearest section above it, and to the nearest subsection above it unless
a section comes first. Ownership is derived again on every read, so reorders,
inserts and deletes can never leave a dangling parent.

Works on anything with a ``kind`` attribute (schemas or ORM rows).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar

from devispro.models.enums import BILLABLE_KINDS, LineItemKind

_SECTION = LineItemKind.SECTION.value
_SUBSECTION = LineItemKind.SUBSECTION.value


RowT = TypeVar("RowT")


def kind_of(item: Any) -> str:
    """Normalized kind string of a row ("" when missing)."""
    kind = getattr(item, "kind", None)
    if kind is None:
        return ""
    return str(getattr(kind, "value", kind))


def is_billable(item: Any) -> bool:
    """Material, labor and work rows carry prices."""
    return kind_of(item) in BILLABLE_KINDS


def order_by_position(items: Sequence[RowT]) -> list[RowT]:
    """Rows sorted by position. Stable, so equal positions keep list order."""
    return sorted(items, key=_position_key)


def _position_key(item: Any) -> int:
    try:
        return int(getattr(item, "position", 0) or 0)
    except (TypeError, ValueError):
        return 0


def _check_index(items: Sequence[Any], index: int) -> None:
    if index < 0 or index >= len(items):
        raise IndexError(f"line item index {index} out of range for {len(items)} rows")


def owner_section(items: Sequence[Any], index: int) -> int | None:
    """Index of the section owning ``items[index]``, or None for an orphan row."""
    _check_index(items, index)
    for i in range(index - 1, -1, -1):
        if kind_of(items[i]) == _SECTION:
            return i
    return None


def owner_subsection(items: Sequence[Any], index: int) -> int | None:
    """Index of the subsection owning ``items[index]``.

    Returns None when a section is met before any subsection: a subsection
    only reaches down to the next heading.
    """
    _check_index(items, index)
    for i in range(index - 1, -1, -1):
        kind = kind_of(items[i])
        if kind == _SUBSECTION:
            return i
        if kind == _SECTION:
            return None
    return None


def owned_rows(items: Sequence[Any], index: int) -> list[int]:
    """Indices of the billable rows owned by the heading at ``index``.

    A section owns rows up to the next section, subsections included.
    A subsection owns rows up to the next section or subsection.
    Any other row owns nothing.
    """
    _check_index(items, index)
    kind = kind_of(items[index])
    if kind == _SECTION:
        stop = {_SECTION}
    elif kind == _SUBSECTION:
        stop = {_SECTION, _SUBSECTION}
    else:
        return []

    owned: list[int] = []
    for i in range(index + 1, len(items)):
        row_kind = kind_of(items[i])
        if row_kind in stop:
            break
        if row_kind in BILLABLE_KINDS:
            owned.append(i)
    return owned


def renumber(items: Sequence[Any]) -> list[str]:
    """Display numbers for each row, in list order.

    Sections are numbered 1, 2, 3; subsections "{section}.{n}" with n
    restarting under each section. Other rows take the number of their owner
    (subsection first, then section) or "" when orphaned. A subsection placed
    before any section is numbered "0.{n}".
    """
    numbers: list[str] = []
    section_no = 0
    subsection_no = 0
    current = ""

    for item in items:
        kind = kind_of(item)
        if kind == _SECTION:
            section_no += 1
            subsection_no = 0
            current = str(section_no)
            numbers.append(current)
        elif kind == _SUBSECTION:
            subsection_no += 1
            current = f"{section_no}.{subsection_no}"
            numbers.append(current)
        else:
            numbers.append(current)
    return numbers
