"""Quote API — CRUD, line-item editing, status, document and sending.

Every write recomputes the quote server-side; the response always carries
the stored totals and rows.
"""
# ruff: noqa: B008

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from devispro.calculators.numbering import format_document_number, parse_document_number
from devispro.calculators.totals import calculate_quote_totals
from devispro.crm.company import get_company
from devispro.db.engine import get_session
from devispro.documents.builder import build_quote_document
from devispro.documents.render import render_quote
from devispro.models.enums import DocumentKind, QuoteStatus
from devispro.models.quote import Quote
from devispro.quotes import service
from devispro.quotes.mapping import quote_out, quote_summary
from devispro.quotes.queries import get_last_number, list_quotes
from devispro.quotes.sequence import number_format_for, sequence_allocator
from devispro.quotes.validation import validate_line_items
from devispro.schemas.calculators import ParsedNumber, QuoteTotals
from devispro.schemas.quotes import (
    LineItemIn,
    LineItemMove,
    NumberingState,
    NumberToParse,
    QuoteIn,
    QuoteOut,
    QuoteSummary,
    QuoteUpdate,
    SendQuoteRequest,
    SendQuoteResult,
    SequenceRestart,
    StatusChange,
    TotalsPreviewIn,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["quotes"])


async def _load(db: AsyncSession, quote_id: uuid.UUID) -> Quote:
    quote = await service.get_quote(db, quote_id)
    if quote is None:
        raise HTTPException(status_code=404, detail=f"Quote {quote_id} not found")
    return quote


async def _reloaded(db: AsyncSession, quote_id: uuid.UUID) -> QuoteOut:
    return quote_out(await _load(db, quote_id))


# ── Quotes ───────────────────────────────────────────────────────────


@router.get("/quotes", response_model=list[QuoteSummary])
async def get_quotes(
    status: QuoteStatus | None = Query(default=None),
    client_id: uuid.UUID | None = Query(default=None, alias="clientId"),
    project_id: uuid.UUID | None = Query(default=None, alias="projectId"),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=50, ge=1, le=200, alias="perPage"),
    db: AsyncSession = Depends(get_session),
) -> list[QuoteSummary]:
    quotes, _ = await list_quotes(db, status, client_id, project_id, page, per_page)
    return [quote_summary(q) for q in quotes]


@router.post("/quotes", response_model=QuoteOut, status_code=201)
async def post_quote(data: QuoteIn, db: AsyncSession = Depends(get_session)) -> QuoteOut:
    quote = await service.create_quote(db, data)
    return await _reloaded(db, quote.id)


@router.get("/quotes/{quote_id}", response_model=QuoteOut)
async def get_quote(quote_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> QuoteOut:
    return await _reloaded(db, quote_id)


@router.patch("/quotes/{quote_id}", response_model=QuoteOut)
async def patch_quote(
    quote_id: uuid.UUID,
    data: QuoteUpdate,
    db: AsyncSession = Depends(get_session),
) -> QuoteOut:
    quote = await _load(db, quote_id)
    await service.update_quote(db, quote, data)
    return await _reloaded(db, quote_id)


@router.delete("/quotes/{quote_id}", status_code=204)
async def delete_quote(quote_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> None:
    await service.delete_quote(db, await _load(db, quote_id))


@router.post("/quotes/{quote_id}/status", response_model=QuoteOut)
async def post_status(
    quote_id: uuid.UUID,
    data: StatusChange,
    db: AsyncSession = Depends(get_session),
) -> QuoteOut:
    await service.change_status(db, await _load(db, quote_id), data.status)
    return await _reloaded(db, quote_id)


# ── Line items ───────────────────────────────────────────────────────


@router.post("/quotes/{quote_id}/line-items", response_model=QuoteOut, status_code=201)
async def post_line_item(
    quote_id: uuid.UUID,
    data: LineItemIn,
    db: AsyncSession = Depends(get_session),
) -> QuoteOut:
    await service.add_line_item(db, await _load(db, quote_id), data.item, data.index)
    return await _reloaded(db, quote_id)


@router.put("/quotes/{quote_id}/line-items/{item_id}", response_model=QuoteOut)
async def put_line_item(
    quote_id: uuid.UUID,
    item_id: uuid.UUID,
    data: LineItemIn,
    db: AsyncSession = Depends(get_session),
) -> QuoteOut:
    await service.update_line_item(db, await _load(db, quote_id), item_id, data.item)
    return await _reloaded(db, quote_id)


@router.post("/quotes/{quote_id}/line-items/{item_id}/move", response_model=QuoteOut)
async def move_line_item(
    quote_id: uuid.UUID,
    item_id: uuid.UUID,
    data: LineItemMove,
    db: AsyncSession = Depends(get_session),
) -> QuoteOut:
    await service.move_line_item(db, await _load(db, quote_id), item_id, data.index)
    return await _reloaded(db, quote_id)


@router.delete("/quotes/{quote_id}/line-items/{item_id}", response_model=QuoteOut)
async def delete_line_item(
    quote_id: uuid.UUID,
    item_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
) -> QuoteOut:
    await service.delete_line_item(db, await _load(db, quote_id), item_id)
    return await _reloaded(db, quote_id)


@router.post("/quotes/preview-totals", response_model=QuoteTotals)
async def preview_totals(data: TotalsPreviewIn) -> QuoteTotals:
    """Price unsaved editor content. Nothing is stored.

    Unfinished rows are priced as they are; only out-of-range numbers are refused.
    """
    validate_line_items(data.line_items, require_labels=False)
    return calculate_quote_totals(data.line_items, data.deposit_percent)


# ── Document & sending ───────────────────────────────────────────────


@router.get("/quotes/{quote_id}/document", response_class=PlainTextResponse)
async def get_document(quote_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> PlainTextResponse:
    quote = await _load(db, quote_id)
    document = build_quote_document(quote, await get_company(db))
    return PlainTextResponse(
        render_quote(document),
        headers={"Content-Disposition": f'inline; filename="{quote.number}.txt"'},
    )


@router.post("/quotes/{quote_id}/send", response_model=SendQuoteResult)
async def send_quote(
    quote_id: uuid.UUID,
    data: SendQuoteRequest,
    db: AsyncSession = Depends(get_session),
) -> SendQuoteResult:
    quote = await _load(db, quote_id)
    issuer = await get_company(db)
    document = render_quote(build_quote_document(quote, issuer))
    await service.mark_sent(db, quote, data, document, issuer)
    return SendQuoteResult(id=quote.id, number=quote.number, status=quote.status, recipient=data.email)


# ── Numbering ────────────────────────────────────────────────────────


@router.get("/numbering/{kind}", response_model=NumberingState)
async def get_numbering(kind: DocumentKind, db: AsyncSession = Depends(get_session)) -> NumberingState:
    """Configured format, the last quote number and a sample next number."""
    number_format = number_format_for(kind)
    last_number = await get_last_number(db) if kind == DocumentKind.QUOTE else None
    parsed = None
    if last_number:
        try:
            parsed = parse_document_number(last_number)
        except ValueError:
            logger.warning("Last quote number %r has no sequence part", last_number)
    next_sequence = parsed.sequence + 1 if parsed else 1
    return NumberingState(
        number_format=number_format,
        last_number=last_number,
        parsed_last=parsed,
        example=format_document_number(number_format, next_sequence, datetime.now(UTC)),
    )


@router.put("/numbering/{kind}/sequence", status_code=204)
async def put_sequence(kind: DocumentKind, data: SequenceRestart) -> None:
    await sequence_allocator.restart_at(number_format_for(kind), datetime.now(UTC), data.next_sequence)


@router.post("/numbering/parse", response_model=ParsedNumber)
async def post_parse_number(data: NumberToParse) -> ParsedNumber:
    try:
        return parse_document_number(data.number)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
