"""Quote service — every write path for quotes and their line items.

All mutations go through ``_save_content``: the rows are recomputed with
``calculate_quote_totals`` and every derived field (line totals, heading
subtotals, quote totals, deposit) is written back in one step, so a stored
quote is never half-updated. Client-supplied totals are ignored.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devispro.calculators.totals import calculate_quote_totals
from devispro.config import settings
from devispro.events.bus import emit
from devispro.models.company import Company
from devispro.models.enums import DocumentKind, QuoteStatus
from devispro.models.invoice import Invoice
from devispro.models.quote import Quote, QuoteLineItem
from devispro.quotes.mapping import item_to_row_fields, items_of
from devispro.quotes.sequence import number_format_for, sequence_allocator
from devispro.quotes.validation import validate_line_items
from devispro.schemas.calculators import QuoteTotals
from devispro.schemas.events import EventType, SystemEvent
from devispro.schemas.line_items import AnyLineItem
from devispro.schemas.quotes import QuoteIn, QuoteUpdate, SendQuoteRequest

logger = logging.getLogger(__name__)


class QuoteStateError(Exception):
    """Raised when an operation is not allowed in the quote's current state."""


class QuoteConflictError(Exception):
    """Raised when the editor saved over a newer version of the quote."""


class LineItemNotFoundError(LookupError):
    """Raised when a line item id does not belong to the quote."""


# Status graph: signed quotes are final (invoices depend on them)
ALLOWED_TRANSITIONS: dict[QuoteStatus, frozenset[QuoteStatus]] = {
    QuoteStatus.DRAFT: frozenset({QuoteStatus.SENT, QuoteStatus.SIGNED, QuoteStatus.REJECTED}),
    QuoteStatus.SENT: frozenset({QuoteStatus.DRAFT, QuoteStatus.SIGNED, QuoteStatus.REJECTED}),
    QuoteStatus.REJECTED: frozenset({QuoteStatus.DRAFT}),
    QuoteStatus.SIGNED: frozenset(),
}

# NOT NULL columns a partial update can name; an explicit null leaves them as they are
_REQUIRED_FIELDS: frozenset[str] = frozenset({"client_id", "issue_date", "deposit_percent"})


# ── Totals write-back ────────────────────────────────────────────────


def apply_totals(quote: Quote, totals: QuoteTotals) -> None:
    """Write every derived field of ``totals`` onto the quote and its rows.

    Rows are matched by id; unmatched items become new rows and rows absent
    from ``totals`` are removed. Positions are renumbered 0..n-1 in the
    calculator's order.
    """
    existing = {row.id: row for row in quote.line_items if row.id is not None}
    rows: list[QuoteLineItem] = []
    for position, item in enumerate(totals.line_items):
        row = existing.get(item.id) if item.id is not None else None
        if row is None:
            row = QuoteLineItem(id=uuid.uuid4())
        for name, value in item_to_row_fields(item).items():
            setattr(row, name, value)
        row.position = position
        rows.append(row)

    quote.line_items = rows
    quote.total_excl_tax = totals.total_excl_tax
    quote.total_tax = totals.total_tax
    quote.total_incl_tax = totals.total_incl_tax
    quote.deposit_percent = totals.deposit_percent
    quote.deposit_amount = totals.deposit_amount


def recompute_quote(quote: Quote, items: Sequence[AnyLineItem] | None = None) -> QuoteTotals:
    """Recompute ``quote`` from ``items`` (default: its current rows) and apply."""
    if items is None:
        items = items_of(quote)
    totals = calculate_quote_totals(list(items), quote.deposit_percent)
    apply_totals(quote, totals)
    return totals


async def _save_content(db: AsyncSession, quote: Quote, items: Sequence[AnyLineItem]) -> QuoteTotals:
    totals = recompute_quote(quote, items)
    await db.flush()
    await emit(SystemEvent(
        event_type=EventType.QUOTE_TOTALS_RECOMPUTED,
        entity_type="quote",
        entity_id=quote.id,
        data={
            "number": quote.number,
            "rows": len(totals.line_items),
            "total_incl_tax": str(totals.total_incl_tax),
        },
        source_module="quotes.service",
    ))
    return totals


# ── Queries ──────────────────────────────────────────────────────────


async def get_quote(db: AsyncSession, quote_id: uuid.UUID) -> Quote | None:
    """Load a quote with client, project and rows."""
    result = await db.execute(
        select(Quote)
        .where(Quote.id == quote_id)
        .options(
            selectinload(Quote.client),
            selectinload(Quote.project),
            selectinload(Quote.line_items),
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def count_invoices(db: AsyncSession, quote_id: uuid.UUID) -> int:
    result = await db.execute(select(func.count(Invoice.id)).where(Invoice.quote_id == quote_id))
    return result.scalar() or 0


# ── Quote lifecycle ──────────────────────────────────────────────────


async def create_quote(db: AsyncSession, data: QuoteIn, now: datetime | None = None) -> Quote:
    """Create a quote, allocating a number when none is given."""
    now = now or datetime.now(UTC)
    validate_line_items(data.line_items)

    number = data.number or await sequence_allocator.next_number(
        number_format_for(DocumentKind.QUOTE), now,
    )
    issue_date = data.issue_date or now.date()
    deposit_percent = (
        data.deposit_percent
        if data.deposit_percent is not None
        else settings.quotes.default_deposit_percent
    )

    quote = Quote(
        id=uuid.uuid4(),
        client_id=data.client_id,
        project_id=data.project_id,
        number=number,
        status=QuoteStatus.DRAFT.value,
        issue_date=issue_date,
        valid_until=data.valid_until or _default_validity(issue_date),
        notes=data.notes,
        conditions=data.conditions,
        deposit_percent=deposit_percent,
    )
    quote.line_items = []
    db.add(quote)
    totals = recompute_quote(quote, data.line_items)
    await db.flush()

    logger.info("Quote %s created: %d rows, total %s", number, len(totals.line_items), totals.total_incl_tax)
    await emit(SystemEvent(
        event_type=EventType.QUOTE_CREATED,
        entity_type="quote",
        entity_id=quote.id,
        data={"number": number, "client_id": str(data.client_id), "total_incl_tax": str(totals.total_incl_tax)},
        source_module="quotes.service",
    ))
    return quote


async def update_quote(db: AsyncSession, quote: Quote, data: QuoteUpdate) -> Quote:
    """Apply a partial update. A given ``line_items`` list replaces the content."""
    if data.version is not None and data.version != quote.version:
        raise QuoteConflictError(
            f"quote {quote.number} is at version {quote.version}, edit started from {data.version}"
        )

    fields = data.model_dump(exclude_unset=True, exclude={"line_items", "version"})
    if data.line_items is not None or "deposit_percent" in fields:
        _require_editable(quote)

    for name, value in fields.items():
        if value is None and name in _REQUIRED_FIELDS:
            continue
        setattr(quote, name, value)

    if data.line_items is not None:
        validate_line_items(data.line_items)
        items: Sequence[AnyLineItem] = data.line_items
    else:
        items = items_of(quote)
    totals = await _save_content(db, quote, items)

    logger.info("Quote %s updated (%s)", quote.number, ", ".join(sorted(fields)) or "content")
    await emit(SystemEvent(
        event_type=EventType.QUOTE_UPDATED,
        entity_type="quote",
        entity_id=quote.id,
        data={"number": quote.number, "fields": sorted(fields), "total_incl_tax": str(totals.total_incl_tax)},
        source_module="quotes.service",
    ))
    return quote


async def delete_quote(db: AsyncSession, quote: Quote) -> None:
    """Delete a quote and its rows. Quotes with invoices are kept."""
    invoices = await count_invoices(db, quote.id)
    if invoices:
        raise QuoteStateError(f"quote {quote.number} has {invoices} invoice(s) and cannot be deleted")

    await db.delete(quote)
    await db.flush()
    logger.info("Quote %s deleted", quote.number)
    await emit(SystemEvent(
        event_type=EventType.QUOTE_DELETED,
        entity_type="quote",
        entity_id=quote.id,
        data={"number": quote.number},
        source_module="quotes.service",
    ))


async def change_status(db: AsyncSession, quote: Quote, status: QuoteStatus) -> Quote:
    """Move a quote along the status graph.

    Raises:
        QuoteStateError: If the transition is not allowed.
    """
    current = QuoteStatus(quote.status)
    if status == current:
        return quote
    if status not in ALLOWED_TRANSITIONS[current]:
        raise QuoteStateError(f"quote {quote.number} cannot go from {current.value} to {status.value}")

    quote.status = status.value
    await db.flush()
    logger.info("Quote %s status %s -> %s", quote.number, current.value, status.value)
    await emit(SystemEvent(
        event_type=EventType.QUOTE_STATUS_CHANGED,
        entity_type="quote",
        entity_id=quote.id,
        data={"number": quote.number, "from": current.value, "to": status.value},
        source_module="quotes.service",
    ))
    return quote


async def mark_sent(
    db: AsyncSession,
    quote: Quote,
    request: SendQuoteRequest,
    document: str,
    company: Company | None = None,
) -> Quote:
    """Hand the rendered quote to the mail transport and mark a draft as sent.

    The message travels on the ``quote.sent`` event; delivery is done by
    whichever subscriber owns the mail transport.
    """
    if quote.status == QuoteStatus.REJECTED.value:
        raise QuoteStateError(f"quote {quote.number} was rejected and cannot be sent")

    if quote.status == QuoteStatus.DRAFT.value:
        quote.status = QuoteStatus.SENT.value
        await db.flush()

    logger.info("Quote %s sent to %s", quote.number, request.email)
    await emit(SystemEvent(
        event_type=EventType.QUOTE_SENT,
        entity_type="quote",
        entity_id=quote.id,
        data={
            "number": quote.number,
            "recipient": request.email,
            "subject": request.subject,
            "message": request.message,
            "sender_name": (company and company.company_name) or settings.company.sender_name,
            "sender_email": (company and company.email) or settings.company.sender_email,
            "document": document,
        },
        source_module="quotes.service",
    ))
    return quote


# ── Line items ───────────────────────────────────────────────────────


async def add_line_item(
    db: AsyncSession,
    quote: Quote,
    item: AnyLineItem,
    index: int | None = None,
) -> QuoteTotals:
    """Insert a row at ``index`` in display order (append when None)."""
    _require_editable(quote)
    validate_line_items([item])
    items = items_of(quote)
    if index is None or index > len(items):
        index = len(items)
    items.insert(max(index, 0), item.model_copy(update={"id": None}))
    return await _save_content(db, quote, _renumbered(items))


async def update_line_item(
    db: AsyncSession,
    quote: Quote,
    item_id: uuid.UUID,
    item: AnyLineItem,
) -> QuoteTotals:
    """Replace the content of one row, keeping its place."""
    _require_editable(quote)
    validate_line_items([item])
    items = items_of(quote)
    index = _index_of(items, item_id)
    items[index] = item.model_copy(update={"id": item_id, "position": items[index].position})
    return await _save_content(db, quote, items)


async def move_line_item(
    db: AsyncSession,
    quote: Quote,
    item_id: uuid.UUID,
    index: int,
) -> QuoteTotals:
    """Move one row to ``index`` in display order. Ownership follows the new place."""
    _require_editable(quote)
    items = items_of(quote)
    moved = items.pop(_index_of(items, item_id))
    items.insert(min(max(index, 0), len(items)), moved)
    return await _save_content(db, quote, _renumbered(items))


async def delete_line_item(db: AsyncSession, quote: Quote, item_id: uuid.UUID) -> QuoteTotals:
    """Remove one row. Rows it headed fall under the previous heading."""
    _require_editable(quote)
    items = items_of(quote)
    del items[_index_of(items, item_id)]
    return await _save_content(db, quote, items)


# ── Helpers ──────────────────────────────────────────────────────────


def _default_validity(issue_date: date) -> date:
    return issue_date + timedelta(days=settings.quotes.validity_days)


def _require_editable(quote: Quote) -> None:
    if quote.status == QuoteStatus.SIGNED.value:
        raise QuoteStateError(f"quote {quote.number} is signed and its content cannot change")


def _index_of(items: Sequence[AnyLineItem], item_id: uuid.UUID) -> int:
    for i, item in enumerate(items):
        if item.id == item_id:
            return i
    raise LineItemNotFoundError(f"line item {item_id} not found")


def _renumbered(items: Sequence[Any]) -> list[AnyLineItem]:
    return [item.model_copy(update={"position": i}) for i, item in enumerate(items)]
