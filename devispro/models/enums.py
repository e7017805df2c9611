"""Domain enums used across SQLAlchemy models and Pydantic schemas.

All enums use str mixin for JSON serialization and plain string columns.
"""

from __future__ import annotations

from enum import Enum


class LineItemKind(str, Enum):
    """Row type of a quote's content. Decides which fields are meaningful."""

    SECTION = "section"  # "Titre"
    SUBSECTION = "subsection"  # "Sous-titre"
    TEXT = "text"
    MATERIAL = "material"
    LABOR = "labor"
    WORK = "work"


BILLABLE_KINDS: frozenset[str] = frozenset({
    LineItemKind.MATERIAL.value,
    LineItemKind.LABOR.value,
    LineItemKind.WORK.value,
})

HEADING_KINDS: frozenset[str] = frozenset({
    LineItemKind.SECTION.value,
    LineItemKind.SUBSECTION.value,
})

# Older rows stored "title"/"subtitle" for headings
LEGACY_KIND_ALIASES: dict[str, str] = {
    "title": LineItemKind.SECTION.value,
    "subtitle": LineItemKind.SUBSECTION.value,
}


class ClientType(str, Enum):
    """Whether the client is a private person or a company."""

    INDIVIDUAL = "individual"
    COMPANY = "company"


class QuoteStatus(str, Enum):
    """Quote lifecycle."""

    DRAFT = "draft"
    SENT = "sent"
    SIGNED = "signed"
    REJECTED = "rejected"


class InvoiceType(str, Enum):
    """What part of the quote an invoice bills."""

    DEPOSIT = "deposit"  # "Facture d'acompte"
    INTERMEDIATE = "intermediate"  # "Situation de travaux"
    FINAL = "final"


class InvoiceStatus(str, Enum):
    """Invoice payment status."""

    PENDING = "pending"
    PAID = "paid"


class NumberSeparator(str, Enum):
    """Separator between the parts of a document number."""

    DASH = "-"
    SLASH = "/"
    NONE = ""


class DateComponent(str, Enum):
    """Date part embedded in a document number."""

    NONE = "none"
    YEAR = "year"
    YEAR_MONTH = "year_month"


class DocumentKind(str, Enum):
    """Document families that carry their own number sequence."""

    QUOTE = "quote"
    INVOICE = "invoice"
