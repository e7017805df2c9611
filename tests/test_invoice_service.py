"""Tests for issuing invoices against quotes."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from devispro.invoices import service
from devispro.models.enums import InvoiceStatus, InvoiceType, QuoteStatus
from devispro.models.invoice import Invoice
from devispro.models.quote import Quote
from devispro.quotes.service import QuoteStateError
from devispro.schemas.events import EventType
from devispro.schemas.invoices import InvoiceIn, InvoiceUpdate

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)


def _make_quote(status: QuoteStatus = QuoteStatus.SIGNED) -> Quote:
    return Quote(
        id=uuid.uuid4(),
        client_id=uuid.uuid4(),
        number="DEVIS-2026-010",
        status=status.value,
        issue_date=date(2026, 10, 1),
        total_excl_tax=Decimal("1000.00"),
        total_tax=Decimal("200.00"),
        total_incl_tax=Decimal("1200.00"),
        deposit_percent=30,
        deposit_amount=Decimal("360.00"),
    )


def _make_db(issued: list[tuple[str, Decimal]] | None = None) -> AsyncMock:
    """Mock AsyncSession whose invoice lookup returns the given (type, total) rows."""
    db = AsyncMock()
    db.add = MagicMock()
    result = MagicMock()
    result.all.return_value = issued or []
    db.execute = AsyncMock(return_value=result)
    return db


@pytest.fixture
def mocks():
    with (
        patch("devispro.invoices.service.emit", new_callable=AsyncMock) as mock_emit,
        patch("devispro.invoices.service.sequence_allocator") as allocator,
    ):
        allocator.next_number = AsyncMock(return_value="FACTURE-2026-001")
        yield {"emit": mock_emit, "allocator": allocator}


class TestCreateInvoice:
    @pytest.mark.asyncio()
    async def test_deposit_invoice(self, mocks):
        db = _make_db()
        invoice = await service.create_invoice(db, _make_quote(), InvoiceIn(quote_id=uuid.uuid4(), type="deposit"), NOW)

        assert invoice.number == "FACTURE-2026-001"
        assert invoice.type == "deposit"
        assert invoice.status == "pending"
        assert invoice.total_incl_tax == Decimal("360.00")
        assert invoice.total_excl_tax == Decimal("300.00")
        assert invoice.due_date == date(2026, 11, 18)
        db.add.assert_called_once_with(invoice)
        assert mocks["emit"].await_args.args[0].event_type == EventType.INVOICE_CREATED

    @pytest.mark.asyncio()
    async def test_final_invoice_deducts_previous(self, mocks):
        db = _make_db([("deposit", Decimal("360.00")), ("intermediate", Decimal("120.00"))])
        data = InvoiceIn(quote_id=uuid.uuid4(), type=InvoiceType.FINAL)
        invoice = await service.create_invoice(db, _make_quote(), data, NOW)

        assert invoice.total_incl_tax == Decimal("720.00")
        assert invoice.total_excl_tax == Decimal("600.00")
        assert invoice.total_tax == Decimal("120.00")

    @pytest.mark.asyncio()
    async def test_second_final_invoice_rejected(self, mocks):
        db = _make_db([("final", Decimal("1200.00"))])
        with pytest.raises(QuoteStateError):
            await service.create_invoice(db, _make_quote(), InvoiceIn(quote_id=uuid.uuid4()), NOW)

    @pytest.mark.asyncio()
    async def test_no_invoice_after_final(self, mocks):
        for kind, percent in ((InvoiceType.DEPOSIT, None), (InvoiceType.INTERMEDIATE, Decimal("10"))):
            db = _make_db([("deposit", Decimal("360.00")), ("final", Decimal("840.00"))])
            data = InvoiceIn(quote_id=uuid.uuid4(), type=kind, percent=percent)
            with pytest.raises(QuoteStateError, match="final invoice"):
                await service.create_invoice(db, _make_quote(), data, NOW)
        mocks["allocator"].next_number.assert_not_awaited()
        mocks["emit"].assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_second_deposit_rejected(self, mocks):
        db = _make_db([("deposit", Decimal("360.00"))])
        with pytest.raises(QuoteStateError, match="deposit invoice"):
            await service.create_invoice(db, _make_quote(), InvoiceIn(quote_id=uuid.uuid4(), type="deposit"), NOW)
        db.add.assert_not_called()

    @pytest.mark.asyncio()
    async def test_intermediate_after_deposit_allowed(self, mocks):
        db = _make_db([("deposit", Decimal("360.00"))])
        data = InvoiceIn(quote_id=uuid.uuid4(), type=InvoiceType.INTERMEDIATE, percent=Decimal("50"))
        invoice = await service.create_invoice(db, _make_quote(), data, NOW)
        assert invoice.total_incl_tax == Decimal("600.00")

    @pytest.mark.asyncio()
    async def test_unsigned_quote_rejected(self, mocks):
        for status in (QuoteStatus.DRAFT, QuoteStatus.SENT, QuoteStatus.REJECTED):
            with pytest.raises(QuoteStateError):
                await service.create_invoice(
                    _make_db(), _make_quote(status), InvoiceIn(quote_id=uuid.uuid4(), type="deposit"), NOW,
                )
        mocks["allocator"].next_number.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_intermediate_invoice(self, mocks):
        data = InvoiceIn(quote_id=uuid.uuid4(), type=InvoiceType.INTERMEDIATE, percent=Decimal("40"))
        invoice = await service.create_invoice(_make_db(), _make_quote(), data, NOW)
        assert invoice.total_incl_tax == Decimal("480.00")

    def test_intermediate_requires_percent(self):
        with pytest.raises(ValueError):
            InvoiceIn(quote_id=uuid.uuid4(), type=InvoiceType.INTERMEDIATE)


class TestUpdateInvoice:
    def _invoice(self, status: InvoiceStatus = InvoiceStatus.PENDING) -> Invoice:
        return Invoice(
            id=uuid.uuid4(),
            number="FACTURE-2026-001",
            status=status.value,
            total_incl_tax=Decimal("360.00"),
            paid_amount=Decimal("0"),
        )

    @pytest.mark.asyncio()
    async def test_mark_paid_settles_balance(self, mocks):
        invoice = self._invoice()
        await service.update_invoice(_make_db(), invoice, InvoiceUpdate(status=InvoiceStatus.PAID))
        assert invoice.status == "paid"
        assert invoice.paid_amount == Decimal("360.00")

    @pytest.mark.asyncio()
    async def test_partial_payment(self, mocks):
        invoice = self._invoice()
        await service.update_invoice(_make_db(), invoice, InvoiceUpdate(paid_amount=Decimal("100")))
        assert invoice.status == "pending"
        assert invoice.paid_amount == Decimal("100")

    @pytest.mark.asyncio()
    async def test_paid_invoice_cannot_be_deleted(self, mocks):
        db = _make_db()
        with pytest.raises(QuoteStateError):
            await service.delete_invoice(db, self._invoice(InvoiceStatus.PAID))
        db.delete.assert_not_awaited()
