"""Quote and QuoteLineItem models.

Line items are a flat list ordered by ``position``; sections and
subsections are inferred from that order (see calculators.hierarchy).
Totals columns are derived and only ever written by quotes.service.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devispro.models.base import Base, TimestampMixin
from devispro.models.enums import QuoteStatus

if TYPE_CHECKING:
    from devispro.models.client import Client
    from devispro.models.invoice import Invoice
    from devispro.models.project import Project


class Quote(TimestampMixin, Base):
    """A priced proposal ("devis") sent to a client."""

    __tablename__ = "quotes"

    # Foreign keys
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("clients.id"), nullable=False, index=True
    )
    project_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id"), index=True
    )

    number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=QuoteStatus.DRAFT.value)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    valid_until: Mapped[date | None] = mapped_column(Date)
    notes: Mapped[str | None] = mapped_column(Text)
    conditions: Mapped[str | None] = mapped_column(Text)

    # Derived totals
    total_excl_tax: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    total_tax: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    total_incl_tax: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    deposit_percent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deposit_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))

    # Optimistic concurrency: concurrent writers get StaleDataError
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Relationships
    client: Mapped[Client] = relationship("Client", back_populates="quotes")
    project: Mapped[Project | None] = relationship("Project")
    line_items: Mapped[list[QuoteLineItem]] = relationship(
        "QuoteLineItem",
        back_populates="quote",
        order_by="QuoteLineItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    invoices: Mapped[list[Invoice]] = relationship("Invoice", back_populates="quote")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Quote number={self.number} status={self.status} total={self.total_incl_tax}>"


class QuoteLineItem(TimestampMixin, Base):
    """One row of a quote's content (heading, text or billable line)."""

    __tablename__ = "quote_line_items"

    quote_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True
    )

    kind: Mapped[str] = mapped_column(String(20), nullable=False, comment="LineItemKind enum value")
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    label: Mapped[str | None] = mapped_column(String(500))
    body: Mapped[str | None] = mapped_column(Text)

    # Billable rows only
    quantity: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    unit: Mapped[str | None] = mapped_column(String(20))
    unit_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    tax_rate_percent: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    line_total_excl_tax: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    technical_details: Mapped[list[str] | None] = mapped_column(JSONB, comment="Material and work rows only")

    # Heading rows only
    section_subtotal: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    # Relationships
    quote: Mapped[Quote] = relationship("Quote", back_populates="line_items")

    def __repr__(self) -> str:
        return f"<QuoteLineItem kind={self.kind} position={self.position}>"
