"""Project model — a job site ("chantier") belonging to a client."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devispro.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from devispro.models.client import Client


class Project(TimestampMixin, Base):
    """A construction site quoted for a client."""

    __tablename__ = "projects"

    # Foreign keys
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("clients.id"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    # Site address
    address: Mapped[str | None] = mapped_column(String(500))
    city: Mapped[str | None] = mapped_column(String(100))
    zip_code: Mapped[str | None] = mapped_column(String(10))
    country: Mapped[str | None] = mapped_column(String(100), default="France")

    # Schedule
    start_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)
    progress: Mapped[int] = mapped_column(Integer, default=0, comment="Completion percentage 0-100")

    # Relationships
    client: Mapped[Client] = relationship("Client", back_populates="projects")

    def __repr__(self) -> str:
        return f"<Project name={self.name} client_id={self.client_id}>"
