"""Invoice API."""
# ruff: noqa: B008

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from devispro.db.engine import get_session
from devispro.invoices import service
from devispro.models.enums import InvoiceStatus
from devispro.models.invoice import Invoice
from devispro.quotes.service import get_quote
from devispro.schemas.invoices import InvoiceIn, InvoiceOut, InvoiceUpdate

router = APIRouter(prefix="/api", tags=["invoices"])


async def _invoice(db: AsyncSession, invoice_id: uuid.UUID) -> Invoice:
    invoice = await service.get_invoice(db, invoice_id)
    if invoice is None:
        raise HTTPException(status_code=404, detail=f"Invoice {invoice_id} not found")
    return invoice


@router.get("/invoices", response_model=list[InvoiceOut])
async def get_invoices(
    quote_id: uuid.UUID | None = Query(default=None, alias="quoteId"),
    status: InvoiceStatus | None = Query(default=None),
    db: AsyncSession = Depends(get_session),
) -> list[Invoice]:
    return await service.list_invoices(db, quote_id, status)


@router.post("/invoices", response_model=InvoiceOut, status_code=201)
async def post_invoice(data: InvoiceIn, db: AsyncSession = Depends(get_session)) -> Invoice:
    quote = await get_quote(db, data.quote_id)
    if quote is None:
        raise HTTPException(status_code=404, detail=f"Quote {data.quote_id} not found")
    invoice = await service.create_invoice(db, quote, data)
    return await _invoice(db, invoice.id)


@router.get("/invoices/{invoice_id}", response_model=InvoiceOut)
async def get_invoice(invoice_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> Invoice:
    return await _invoice(db, invoice_id)


@router.patch("/invoices/{invoice_id}", response_model=InvoiceOut)
async def patch_invoice(
    invoice_id: uuid.UUID,
    data: InvoiceUpdate,
    db: AsyncSession = Depends(get_session),
) -> Invoice:
    await service.update_invoice(db, await _invoice(db, invoice_id), data)
    return await _invoice(db, invoice_id)


@router.delete("/invoices/{invoice_id}", status_code=204)
async def delete_invoice(invoice_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> None:
    await service.delete_invoice(db, await _invoice(db, invoice_id))
