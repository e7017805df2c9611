"""Conversion between QuoteLineItem rows and typed line-item schemas."""

from __future__ import annotations

from typing import Any

from devispro.calculators.totals import summarize_vat
from devispro.models.quote import Quote, QuoteLineItem
from devispro.schemas.clients import ClientRef, ProjectRef
from devispro.schemas.line_items import AnyLineItem, UnknownItem, parse_line_item
from devispro.schemas.quotes import QuoteOut, QuoteSummary

# Columns a row can carry, in snake_case
_ROW_FIELDS: tuple[str, ...] = (
    "label",
    "body",
    "quantity",
    "unit",
    "unit_price",
    "tax_rate_percent",
    "line_total_excl_tax",
    "technical_details",
    "section_subtotal",
)


def row_to_item(row: QuoteLineItem) -> AnyLineItem:
    """Typed schema for a stored row. Never raises for bad stored data."""
    data: dict[str, Any] = {"id": row.id, "kind": row.kind, "position": row.position}
    for name in _ROW_FIELDS:
        value = getattr(row, name, None)
        if value is not None:
            data[name] = value
    return parse_line_item(data)


def item_to_row_fields(item: AnyLineItem) -> dict[str, Any]:
    """Column values for a schema item. Fields the kind lacks are set to None.

    Unknown kinds only report kind and position, so stored legacy values
    survive a save.
    """
    fields: dict[str, Any] = {"kind": item.kind, "position": item.position}
    if isinstance(item, UnknownItem):
        return fields
    for name in _ROW_FIELDS:
        fields[name] = getattr(item, name, None)
    if fields["technical_details"] is not None:
        fields["technical_details"] = list(fields["technical_details"]) or None
    return fields


def items_of(quote: Quote) -> list[AnyLineItem]:
    return [row_to_item(row) for row in quote.line_items]


def quote_summary(quote: Quote) -> QuoteSummary:
    return QuoteSummary(
        id=quote.id,
        number=quote.number,
        status=quote.status,
        issue_date=quote.issue_date,
        valid_until=quote.valid_until,
        total_excl_tax=quote.total_excl_tax,
        total_incl_tax=quote.total_incl_tax,
        client=_client_ref(quote),
        project=ProjectRef.model_validate(quote.project) if quote.project else None,
    )


def quote_out(quote: Quote) -> QuoteOut:
    """Full API view of a loaded quote (client, project and rows loaded)."""
    items = items_of(quote)
    summary = quote_summary(quote)
    return QuoteOut(
        **summary.model_dump(),
        client_id=quote.client_id,
        project_id=quote.project_id,
        notes=quote.notes,
        conditions=quote.conditions,
        total_tax=quote.total_tax,
        deposit_percent=quote.deposit_percent,
        deposit_amount=quote.deposit_amount,
        version=quote.version,
        line_items=items,
        vat_breakdown=summarize_vat(items),
        created_at=quote.created_at,
        updated_at=quote.updated_at,
    )


def _client_ref(quote: Quote) -> ClientRef | None:
    client = quote.client
    if client is None:
        return None
    return ClientRef(id=client.id, display_name=client.display_name, email=client.email)
