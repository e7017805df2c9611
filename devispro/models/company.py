"""Company model — the contractor issuing quotes and invoices.

Holds the legal identity printed on every document (SIRET, RCS, insurance).
"""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from devispro.models.base import Base, TimestampMixin


class Company(TimestampMixin, Base):
    """Issuer profile. One row per installation."""

    __tablename__ = "companies"

    # Identity
    company_name: Mapped[str | None] = mapped_column(String(200))
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(30))
    address: Mapped[str | None] = mapped_column(String(500))
    website: Mapped[str | None] = mapped_column(String(255))
    logo: Mapped[str | None] = mapped_column(Text, comment="Logo URL or data URI")
    primary_color: Mapped[str | None] = mapped_column(String(50), default="hsl(172, 80%, 29%)")

    # Legal registration
    siret: Mapped[str | None] = mapped_column(String(14))
    rcs: Mapped[str | None] = mapped_column(String(100))
    naf: Mapped[str | None] = mapped_column(String(10), comment="APE/NAF activity code")
    vat_number: Mapped[str | None] = mapped_column(String(20))
    capital_social: Mapped[str | None] = mapped_column(String(50))

    # Mandatory BTP insurance
    decennale_insurance: Mapped[str | None] = mapped_column(String(500))
    biennale_insurance: Mapped[str | None] = mapped_column(String(500))
    legal_mentions: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<Company name={self.company_name} siret={self.siret}>"
