"""Invoice service — issue, list, update and delete invoices.

An invoice is always issued from a signed quote. Its amounts come from
calculators.invoicing; its number from the invoice sequence.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devispro.calculators.invoicing import calculate_invoice_amounts
from devispro.events.bus import emit
from devispro.models.enums import DocumentKind, InvoiceStatus, InvoiceType, QuoteStatus
from devispro.models.invoice import Invoice
from devispro.models.quote import Quote
from devispro.quotes.sequence import number_format_for, sequence_allocator
from devispro.quotes.service import QuoteStateError
from devispro.schemas.events import EventType, SystemEvent
from devispro.schemas.invoices import InvoiceIn, InvoiceUpdate

logger = logging.getLogger(__name__)

PAYMENT_TERM_DAYS = 30


async def issued_invoices(db: AsyncSession, quote_id: uuid.UUID) -> list[tuple[str, Decimal]]:
    """(type, total incl. tax) of every invoice already issued on a quote."""
    result = await db.execute(
        select(Invoice.type, Invoice.total_incl_tax).where(Invoice.quote_id == quote_id)
    )
    return [(kind, total) for kind, total in result.all()]


async def create_invoice(
    db: AsyncSession,
    quote: Quote,
    data: InvoiceIn,
    now: datetime | None = None,
) -> Invoice:
    """Issue an invoice on a signed quote.

    Raises:
        QuoteStateError: If the quote is not signed, its final invoice was
            already issued, or a second deposit invoice is requested.
    """
    if quote.status != QuoteStatus.SIGNED.value:
        raise QuoteStateError(f"quote {quote.number} is {quote.status}; only signed quotes can be invoiced")

    issued = await issued_invoices(db, quote.id)
    kinds = {kind for kind, _ in issued}
    if InvoiceType.FINAL.value in kinds:
        raise QuoteStateError(f"quote {quote.number} already has a final invoice; nothing is left to bill")
    if data.type == InvoiceType.DEPOSIT and InvoiceType.DEPOSIT.value in kinds:
        raise QuoteStateError(f"quote {quote.number} already has a deposit invoice")

    already = [total for _, total in issued] if data.type == InvoiceType.FINAL else []
    amounts = calculate_invoice_amounts(
        data.type,
        quote.total_excl_tax,
        quote.total_incl_tax,
        deposit_amount=quote.deposit_amount,
        percent=data.percent,
        already_invoiced_incl_tax=already,
    )

    now = now or datetime.now(UTC)
    issue_date = data.issue_date or now.date()
    number = await sequence_allocator.next_number(number_format_for(DocumentKind.INVOICE), now)

    invoice = Invoice(
        id=uuid.uuid4(),
        quote_id=quote.id,
        client_id=quote.client_id,
        project_id=quote.project_id,
        number=number,
        type=data.type.value,
        status=InvoiceStatus.PENDING.value,
        issue_date=issue_date,
        due_date=data.due_date or issue_date + timedelta(days=PAYMENT_TERM_DAYS),
        total_excl_tax=amounts.total_excl_tax,
        total_tax=amounts.total_tax,
        total_incl_tax=amounts.total_incl_tax,
    )
    db.add(invoice)
    await db.flush()

    logger.info(
        "Invoice %s (%s) issued on quote %s: %s incl. tax",
        number, data.type.value, quote.number, amounts.total_incl_tax,
    )
    await emit(SystemEvent(
        event_type=EventType.INVOICE_CREATED,
        entity_type="invoice",
        entity_id=invoice.id,
        data={
            "number": number,
            "type": data.type.value,
            "quote_number": quote.number,
            "total_incl_tax": str(amounts.total_incl_tax),
        },
        source_module="invoices.service",
    ))
    return invoice


async def get_invoice(db: AsyncSession, invoice_id: uuid.UUID) -> Invoice | None:
    result = await db.execute(
        select(Invoice)
        .where(Invoice.id == invoice_id)
        .options(selectinload(Invoice.client))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_invoices(
    db: AsyncSession,
    quote_id: uuid.UUID | None = None,
    status: InvoiceStatus | None = None,
) -> list[Invoice]:
    """Invoices most recent first, optionally for one quote or one status."""
    query = select(Invoice).options(selectinload(Invoice.client))
    if quote_id:
        query = query.where(Invoice.quote_id == quote_id)
    if status:
        query = query.where(Invoice.status == status.value)
    result = await db.execute(query.order_by(Invoice.issue_date.desc(), Invoice.number.desc()))
    return list(result.scalars().all())


async def update_invoice(db: AsyncSession, invoice: Invoice, data: InvoiceUpdate) -> Invoice:
    """Record a payment or change the due date. Marking paid settles the balance."""
    fields = data.model_dump(exclude_unset=True, exclude_none=True)
    status = fields.pop("status", None)
    for name, value in fields.items():
        setattr(invoice, name, value)
    if status is not None:
        invoice.status = status.value
        if status == InvoiceStatus.PAID and "paid_amount" not in fields:
            invoice.paid_amount = invoice.total_incl_tax

    await db.flush()
    logger.info("Invoice %s updated (%s)", invoice.number, invoice.status)
    await emit(SystemEvent(
        event_type=EventType.INVOICE_UPDATED,
        entity_type="invoice",
        entity_id=invoice.id,
        data={"number": invoice.number, "status": invoice.status, "paid_amount": str(invoice.paid_amount)},
        source_module="invoices.service",
    ))
    return invoice


async def delete_invoice(db: AsyncSession, invoice: Invoice) -> None:
    """Delete a pending invoice. Paid invoices are part of the books."""
    if invoice.status == InvoiceStatus.PAID.value:
        raise QuoteStateError(f"invoice {invoice.number} is paid and cannot be deleted")
    await db.delete(invoice)
    await db.flush()
    logger.info("Invoice %s deleted", invoice.number)
    await emit(SystemEvent(
        event_type=EventType.INVOICE_DELETED,
        entity_type="invoice",
        entity_id=invoice.id,
        data={"number": invoice.number},
        source_module="invoices.service",
    ))
