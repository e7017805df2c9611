"""SQLAlchemy ORM models for DevisPro.

Import all models here so Alembic and Base.metadata.create_all() discover them.
"""

from __future__ import annotations

from devispro.models.audit import AuditLog
from devispro.models.base import Base
from devispro.models.client import Client
from devispro.models.company import Company
from devispro.models.enums import (
    ClientType,
    DateComponent,
    DocumentKind,
    InvoiceStatus,
    InvoiceType,
    LineItemKind,
    NumberSeparator,
    QuoteStatus,
)
from devispro.models.invoice import Invoice
from devispro.models.project import Project
from devispro.models.quote import Quote, QuoteLineItem

__all__ = [
    # Base
    "Base",
    # Models
    "Company",
    "Client",
    "Project",
    "Quote",
    "QuoteLineItem",
    "Invoice",
    "AuditLog",
    # Enums
    "LineItemKind",
    "ClientType",
    "QuoteStatus",
    "InvoiceType",
    "InvoiceStatus",
    "NumberSeparator",
    "DateComponent",
    "DocumentKind",
]
