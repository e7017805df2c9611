"""Pydantic schemas for quote line items.

One model per row kind, chosen by ``kind`` in parse_line_item, so a
heading can never carry a unit price. Numeric fields are lenient: blanks and
garbage become None and count as zero in the totals.

JSON uses camelCase (``unitPrice``, ``lineTotalExclTax``); Python uses
snake_case. Both are accepted on input.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from devispro.models.enums import LEGACY_KIND_ALIASES, LineItemKind
from devispro.schemas.types import LenientDecimal


class _LineItemBase(BaseModel):
    """Fields shared by every row."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    id: uuid.UUID | None = None
    position: int = 0


class SectionItem(_LineItemBase):
    """Top-level heading ("Titre"). Owns rows up to the next section."""

    kind: Literal["section"] = "section"
    label: str | None = None
    section_subtotal: Decimal | None = None


class SubsectionItem(_LineItemBase):
    """Second-level heading ("Sous-titre"). Owns rows up to the next heading."""

    kind: Literal["subsection"] = "subsection"
    label: str | None = None
    section_subtotal: Decimal | None = None


class TextItem(_LineItemBase):
    """Free-form paragraph. Never billed."""

    kind: Literal["text"] = "text"
    body: str | None = None


class _BillableBase(_LineItemBase):
    label: str | None = None
    body: str | None = None
    quantity: LenientDecimal = None
    unit: str | None = None
    unit_price: LenientDecimal = None
    tax_rate_percent: LenientDecimal = None
    line_total_excl_tax: LenientDecimal = None


class MaterialItem(_BillableBase):
    """Supplied material. May list its technical sub-components."""

    kind: Literal["material"] = "material"
    technical_details: list[str] = Field(default_factory=list)


class LaborItem(_BillableBase):
    """Labor, usually billed by the hour."""

    kind: Literal["labor"] = "labor"


class WorkItem(_BillableBase):
    """Composite work line (supply and installation)."""

    kind: Literal["work"] = "work"
    technical_details: list[str] = Field(default_factory=list)


class UnknownItem(_LineItemBase):
    """Row with an unrecognized kind, kept so legacy data still renders."""

    model_config = ConfigDict(extra="allow")

    kind: str


AnyLineItem = Union[SectionItem, SubsectionItem, TextItem, MaterialItem, LaborItem, WorkItem, UnknownItem]

LINE_ITEM_MODELS: dict[str, type[_LineItemBase]] = {
    LineItemKind.SECTION.value: SectionItem,
    LineItemKind.SUBSECTION.value: SubsectionItem,
    LineItemKind.TEXT.value: TextItem,
    LineItemKind.MATERIAL.value: MaterialItem,
    LineItemKind.LABOR.value: LaborItem,
    LineItemKind.WORK.value: WorkItem,
}

# Field names used by the first version of the editor
LEGACY_FIELD_ALIASES: dict[str, str] = {
    "title": "label",
    "description": "body",
    "vatRate": "taxRatePercent",
    "totalHT": "lineTotalExclTax",
    "details": "technicalDetails",
    "subtotal": "sectionSubtotal",
}


def parse_line_item(raw: Mapping[str, Any] | AnyLineItem) -> AnyLineItem:
    """Build a typed row from a decoded record, without ever raising for data shape.

    Unknown kinds become UnknownItem. Fields not meaningful for the kind are
    dropped. A row whose remaining fields still fail validation keeps only its
    kind and position.
    """
    if isinstance(raw, _LineItemBase):
        return raw  # type: ignore[return-value]

    data = {LEGACY_FIELD_ALIASES.get(k, k): v for k, v in raw.items()}
    kind = str(data.get("kind") or data.get("type") or "").strip().lower()
    kind = LEGACY_KIND_ALIASES.get(kind, kind)
    data["kind"] = kind
    data.pop("type", None)

    model = LINE_ITEM_MODELS.get(kind)
    if model is None:
        try:
            return UnknownItem.model_validate({**data, "position": _position(data)})
        except ValidationError:
            return UnknownItem(kind=kind, position=_position(data))

    allowed = _accepted_keys(model)
    cleaned = {k: v for k, v in data.items() if k in allowed}
    if "technicalDetails" in cleaned or "technical_details" in cleaned:
        details = cleaned.pop("technicalDetails", None) or cleaned.pop("technical_details", None)
        if isinstance(details, str):
            details = [details]
        cleaned["technical_details"] = [str(d) for d in details or [] if d is not None]
    try:
        return model.model_validate(cleaned)  # type: ignore[return-value]
    except ValidationError:
        fallback: dict[str, Any] = {"kind": kind, "position": _position(data)}
        if isinstance(data.get("id"), uuid.UUID):
            fallback["id"] = data["id"]
        return model.model_validate(fallback)  # type: ignore[return-value]


def _lenient_line_item(value: Any) -> Any:
    if isinstance(value, (Mapping, _LineItemBase)):
        return parse_line_item(value)
    raise ValueError("a line item must be an object")


# Request field type: legacy names are normalised and unknown kinds kept, never a 422
LenientLineItem = Annotated[AnyLineItem, BeforeValidator(_lenient_line_item)]


def parse_line_items(raw_items: list[Mapping[str, Any] | AnyLineItem]) -> list[AnyLineItem]:
    """Parse every record of a quote's content. See parse_line_item."""
    return [parse_line_item(raw) for raw in raw_items]


def _accepted_keys(model: type[BaseModel]) -> set[str]:
    keys: set[str] = set()
    for name, info in model.model_fields.items():
        keys.add(name)
        if info.alias:
            keys.add(info.alias)
    return keys


def _position(data: Mapping[str, Any]) -> int:
    try:
        return int(data.get("position") or 0)
    except (TypeError, ValueError):
        return 0
