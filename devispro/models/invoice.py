"""Invoice model — a bill issued against a signed quote."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devispro.models.base import Base, TimestampMixin
from devispro.models.enums import InvoiceStatus, InvoiceType

if TYPE_CHECKING:
    from devispro.models.client import Client
    from devispro.models.quote import Quote


class Invoice(TimestampMixin, Base):
    """Deposit, intermediate or final invoice ("facture")."""

    __tablename__ = "invoices"

    # Foreign keys
    quote_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("quotes.id"), nullable=False, index=True
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("clients.id"), nullable=False, index=True
    )
    project_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), ForeignKey("projects.id"))

    number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=InvoiceType.FINAL.value)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=InvoiceStatus.PENDING.value)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date)

    # Amounts
    total_excl_tax: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    total_tax: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    total_incl_tax: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))

    # Relationships
    quote: Mapped[Quote] = relationship("Quote", back_populates="invoices")
    client: Mapped[Client] = relationship("Client")

    def __repr__(self) -> str:
        return f"<Invoice number={self.number} type={self.type} total={self.total_incl_tax}>"
