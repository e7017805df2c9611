"""Quote document builder — assembles a printable QuoteDocument from a quote.

Pulls data from:
- Company model (issuer block, legal mentions)
- Quote model with client, project and rows loaded
- Calculators (display numbering, VAT breakdown of the stored line totals)

Every write recomputes and stores the quote's derived fields, so the
document prints the stored totals as they are.
"""

from __future__ import annotations

import logging

from devispro.calculators.hierarchy import order_by_position, renumber
from devispro.calculators.totals import summarize_vat
from devispro.models.client import Client
from devispro.models.company import Company
from devispro.models.quote import Quote
from devispro.quotes.mapping import items_of
from devispro.schemas.documents import DocumentLine, DocumentParty, QuoteDocument
from devispro.schemas.line_items import UnknownItem

logger = logging.getLogger(__name__)


def build_quote_document(quote: Quote, company: Company | None) -> QuoteDocument:
    """Build a QuoteDocument from a fully-loaded quote (client, project, rows)."""
    items = order_by_position(items_of(quote))
    printable = [item for item in items if not isinstance(item, UnknownItem)]
    numbers = renumber(printable)

    lines = [
        DocumentLine(
            number=number,
            kind=item.kind,
            label=getattr(item, "label", None) or "",
            body=getattr(item, "body", None),
            quantity=getattr(item, "quantity", None),
            unit=getattr(item, "unit", None),
            unit_price=getattr(item, "unit_price", None),
            tax_rate_percent=getattr(item, "tax_rate_percent", None),
            line_total_excl_tax=getattr(item, "line_total_excl_tax", None),
            section_subtotal=getattr(item, "section_subtotal", None),
            technical_details=list(getattr(item, "technical_details", None) or []),
        )
        for number, item in zip(numbers, printable)
    ]
    skipped = len(items) - len(printable)
    if skipped:
        logger.warning("Quote %s: %d row(s) of unknown kind left out of the document", quote.number, skipped)

    project = quote.project
    return QuoteDocument(
        number=quote.number,
        status=quote.status,
        issue_date=quote.issue_date,
        valid_until=quote.valid_until,
        issuer=_issuer(company),
        client=_recipient(quote.client),
        project_name=project.name if project else None,
        project_address=_join(project.address, project.zip_code, project.city) if project else None,
        lines=lines,
        vat_breakdown=summarize_vat(items),
        total_excl_tax=quote.total_excl_tax,
        total_tax=quote.total_tax,
        total_incl_tax=quote.total_incl_tax,
        deposit_percent=quote.deposit_percent,
        deposit_amount=quote.deposit_amount,
        conditions=quote.conditions,
        notes=quote.notes,
        legal_mentions=company.legal_mentions if company else None,
    )


def _issuer(company: Company | None) -> DocumentParty:
    if company is None:
        return DocumentParty()
    legal = [
        f"{label} : {value}"
        for label, value in (
            ("SIRET", company.siret),
            ("RCS", company.rcs),
            ("NAF", company.naf),
            ("TVA intracommunautaire", company.vat_number),
            ("Capital social", company.capital_social),
            ("Assurance décennale", company.decennale_insurance),
            ("Assurance biennale", company.biennale_insurance),
        )
        if value
    ]
    return DocumentParty(
        name=company.company_name or "",
        address_lines=[company.address] if company.address else [],
        email=company.email,
        phone=company.phone,
        legal_lines=legal,
    )


def _recipient(client: Client | None) -> DocumentParty:
    if client is None:
        return DocumentParty()
    city_line = _join(client.zip_code, client.city)
    return DocumentParty(
        name=client.display_name,
        address_lines=[line for line in (client.address, city_line) if line],
        email=client.email,
        phone=client.phone,
        legal_lines=[f"SIRET : {client.siret}"] if client.siret else [],
    )


def _join(*parts: str | None) -> str:
    return " ".join(p for p in parts if p)
