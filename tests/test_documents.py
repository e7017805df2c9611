"""Tests for quote documents.

Covers:
- French locale formatting functions
- Document assembly from an in-memory quote (numbering, totals, parties)
- Jinja2 text rendering
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

import pytest

from devispro.documents.builder import build_quote_document
from devispro.documents.formatters import format_currency, format_date, format_number, format_rate
from devispro.documents.render import render_quote
from devispro.models.client import Client
from devispro.models.company import Company
from devispro.models.project import Project
from devispro.models.quote import Quote, QuoteLineItem

# ── Formatter unit tests ─────────────────────────────────────────────


class TestFormatCurrency:
    def test_integer(self):
        assert format_currency(1000) == "1 000,00 €"

    def test_decimal(self):
        assert format_currency(Decimal("1234.5")) == "1 234,50 €"

    def test_large(self):
        assert format_currency(Decimal("1234567.89")) == "1 234 567,89 €"

    def test_rounds_half_up(self):
        assert format_currency(Decimal("0.125")) == "0,13 €"

    def test_none(self):
        assert format_currency(None) == "-"


class TestFormatNumber:
    def test_drops_trailing_zeros(self):
        assert format_number(Decimal("3.00")) == "3"
        assert format_number(Decimal("2.50")) == "2,5"

    def test_thousands(self):
        assert format_number(Decimal("1500")) == "1 500"

    def test_none(self):
        assert format_number(None) == "-"


class TestFormatRate:
    def test_fractional(self):
        assert format_rate(Decimal("5.5")) == "5,5 %"

    def test_whole(self):
        assert format_rate(Decimal("20.00")) == "20 %"

    def test_none(self):
        assert format_rate(None) == "-"


class TestFormatDate:
    def test_date(self):
        assert format_date(date(2026, 10, 19)) == "19/10/2026"

    def test_none(self):
        assert format_date(None) == "-"


# ── Document assembly ────────────────────────────────────────────────


def _row(kind: str, position: int, **fields: object) -> QuoteLineItem:
    return QuoteLineItem(id=uuid.uuid4(), kind=kind, position=position, **fields)


@pytest.fixture
def company() -> Company:
    return Company(
        company_name="Bâtiments Martin",
        address="12 rue des Artisans, 69003 Lyon",
        email="contact@batiments-martin.fr",
        phone="04 72 00 00 00",
        siret="12345678900012",
        decennale_insurance="AXA n° 998877",
        legal_mentions="Pénalités de retard : 3 fois le taux d'intérêt légal.",
    )


@pytest.fixture
def quote() -> Quote:
    client = Client(
        type="company",
        company_name="SCI Les Tilleuls",
        address="4 allée des Tilleuls",
        zip_code="69100",
        city="Villeurbanne",
        email="gestion@tilleuls.fr",
    )
    project = Project(name="Rénovation cuisine", address="4 allée des Tilleuls", zip_code="69100", city="Villeurbanne")
    return Quote(
        id=uuid.uuid4(),
        number="DEVIS-2026-001",
        status="draft",
        issue_date=date(2026, 10, 19),
        valid_until=date(2026, 11, 18),
        deposit_percent=30,
        total_excl_tax=Decimal("1000.00"),
        total_tax=Decimal("200.00"),
        total_incl_tax=Decimal("1200.00"),
        deposit_amount=Decimal("360.00"),
        conditions="Paiement à 30 jours.",
        client=client,
        project=project,
        line_items=[
            _row("section", 0, label="Gros oeuvre", section_subtotal=Decimal("1000.00")),
            _row(
                "material", 1,
                label="Carrelage",
                quantity=Decimal("10"),
                unit="m²",
                unit_price=Decimal("50"),
                tax_rate_percent=Decimal("20"),
                technical_details=["Grès cérame 60x60"],
                line_total_excl_tax=Decimal("500.00"),
            ),
            _row("subsection", 2, label="Main d'oeuvre", section_subtotal=Decimal("500.00")),
            _row(
                "labor", 3,
                label="Pose",
                quantity=Decimal("20"),
                unit="h",
                unit_price=Decimal("25"),
                tax_rate_percent=Decimal("20"),
                line_total_excl_tax=Decimal("500.00"),
            ),
            _row("text", 4, body="Gravats évacués en déchetterie."),
            _row("drawing", 5),
        ],
    )


class TestBuildQuoteDocument:
    def test_stored_totals(self, quote, company):
        doc = build_quote_document(quote, company)
        assert doc.total_excl_tax == Decimal("1000.00")
        assert doc.total_tax == Decimal("200.00")
        assert doc.total_incl_tax == Decimal("1200.00")
        assert doc.deposit_amount == Decimal("360.00")
        assert [(b.rate, b.base_excl_tax, b.tax) for b in doc.vat_breakdown] == [
            (Decimal("20.00"), Decimal("1000.00"), Decimal("200.00")),
        ]

    def test_printed_as_stored(self, quote, company):
        """The document shows what was saved; it does not price the rows again."""
        quote.total_incl_tax = Decimal("1199.99")
        quote.line_items[1].line_total_excl_tax = Decimal("499.99")

        doc = build_quote_document(quote, company)

        assert doc.total_incl_tax == Decimal("1199.99")
        assert doc.lines[1].line_total_excl_tax == Decimal("499.99")

    def test_lines_numbered(self, quote, company):
        doc = build_quote_document(quote, company)
        assert [line.number for line in doc.lines] == ["1", "1", "1.1", "1.1", "1.1"]
        assert doc.lines[0].section_subtotal == Decimal("1000.00")
        assert doc.lines[2].section_subtotal == Decimal("500.00")

    def test_unknown_rows_left_out(self, quote, company):
        doc = build_quote_document(quote, company)
        assert "drawing" not in [line.kind for line in doc.lines]

    def test_parties(self, quote, company):
        doc = build_quote_document(quote, company)
        assert doc.issuer.name == "Bâtiments Martin"
        assert "SIRET : 12345678900012" in doc.issuer.legal_lines
        assert doc.client.name == "SCI Les Tilleuls"
        assert doc.client.address_lines == ["4 allée des Tilleuls", "69100 Villeurbanne"]
        assert doc.project_address == "4 allée des Tilleuls 69100 Villeurbanne"

    def test_without_company(self, quote):
        doc = build_quote_document(quote, None)
        assert doc.issuer.name == ""
        assert doc.legal_mentions is None


class TestRenderQuote:
    def test_header_and_totals(self, quote, company):
        text = render_quote(build_quote_document(quote, company))
        assert "DEVIS N° DEVIS-2026-001" in text
        assert "Date : 19/10/2026" in text
        assert "Valable jusqu'au : 18/11/2026" in text
        assert "Total HT  : 1 000,00 €" in text
        assert "Total TTC : 1 200,00 €" in text
        assert "Acompte à la signature (30 %) : 360,00 €" in text

    def test_line_detail(self, quote, company):
        text = render_quote(build_quote_document(quote, company))
        assert "1. GROS OEUVRE  (sous-total : 1 000,00 € HT)" in text
        assert "1.1 Main d'oeuvre  (sous-total : 500,00 € HT)" in text
        assert "10 m² x 50,00 € HT  (TVA 20 %)  = 500,00 € HT" in text
        assert "- Grès cérame 60x60" in text
        assert "Gravats évacués en déchetterie." in text

    def test_vat_breakdown_and_legal(self, quote, company):
        text = render_quote(build_quote_document(quote, company))
        assert "TVA 20 % sur 1 000,00 € : 200,00 €" in text
        assert "Assurance décennale : AXA n° 998877" in text
        assert "Pénalités de retard" in text
        assert "Chantier : Rénovation cuisine" in text
