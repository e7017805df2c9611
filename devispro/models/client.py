"""Client model — private person or company receiving quotes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devispro.models.base import Base, TimestampMixin
from devispro.models.enums import ClientType

if TYPE_CHECKING:
    from devispro.models.project import Project
    from devispro.models.quote import Quote


class Client(TimestampMixin, Base):
    """A customer of the contractor."""

    __tablename__ = "clients"

    type: Mapped[str] = mapped_column(String(20), nullable=False, default=ClientType.INDIVIDUAL.value)

    # Individual
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))

    # Company
    company_name: Mapped[str | None] = mapped_column(String(200))
    siret: Mapped[str | None] = mapped_column(String(14))

    # Contact
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(30))
    address: Mapped[str | None] = mapped_column(String(500))
    city: Mapped[str | None] = mapped_column(String(100))
    zip_code: Mapped[str | None] = mapped_column(String(10))
    country: Mapped[str | None] = mapped_column(String(100), default="France")

    notes: Mapped[str | None] = mapped_column(Text)

    # Relationships
    projects: Mapped[list[Project]] = relationship("Project", back_populates="client")
    quotes: Mapped[list[Quote]] = relationship("Quote", back_populates="client")

    @property
    def display_name(self) -> str:
        """Company name for companies, "first last" for individuals."""
        if self.type == ClientType.COMPANY.value:
            return self.company_name or ""
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    def __repr__(self) -> str:
        return f"<Client type={self.type} name={self.display_name}>"
