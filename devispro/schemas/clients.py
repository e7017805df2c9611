"""Client and project payloads."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import Field

from devispro.models.enums import ClientType
from devispro.schemas.base import ApiModel


class ClientIn(ApiModel):
    """Create or replace a client."""

    type: ClientType = ClientType.INDIVIDUAL
    first_name: str | None = None
    last_name: str | None = None
    company_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    zip_code: str | None = None
    country: str | None = "France"
    siret: str | None = Field(default=None, max_length=14)
    notes: str | None = None


class ClientOut(ClientIn):
    id: uuid.UUID
    display_name: str
    created_at: datetime | None = None


class ClientRef(ApiModel):
    """Short client reference embedded in quote and invoice listings."""

    id: uuid.UUID
    display_name: str
    email: str | None = None


class ProjectIn(ApiModel):
    """Create or replace a project (job site)."""

    client_id: uuid.UUID
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    address: str | None = None
    city: str | None = None
    zip_code: str | None = None
    country: str | None = "France"
    start_date: date | None = None
    end_date: date | None = None
    progress: int = Field(default=0, ge=0, le=100)


class ProjectOut(ProjectIn):
    id: uuid.UUID
    client: ClientRef | None = None
    created_at: datetime | None = None


class ProjectRef(ApiModel):
    id: uuid.UUID
    name: str
