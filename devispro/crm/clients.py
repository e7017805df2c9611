"""Client and project services."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devispro.events.bus import emit
from devispro.models.client import Client
from devispro.models.project import Project
from devispro.models.quote import Quote
from devispro.quotes.service import QuoteStateError
from devispro.schemas.clients import ClientIn, ProjectIn
from devispro.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)


class ClientInUseError(QuoteStateError):
    """Raised when deleting a client that still has quotes."""


# ── Clients ──────────────────────────────────────────────────────────


async def list_clients(db: AsyncSession, search: str | None = None) -> list[Client]:
    """Clients by name, optionally filtered on name, company or email."""
    query = select(Client)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            Client.first_name.ilike(pattern),
            Client.last_name.ilike(pattern),
            Client.company_name.ilike(pattern),
            Client.email.ilike(pattern),
        ))
    result = await db.execute(query.order_by(Client.company_name, Client.last_name, Client.first_name))
    return list(result.scalars().all())


async def get_client(db: AsyncSession, client_id: uuid.UUID) -> Client | None:
    return await db.get(Client, client_id)


async def create_client(db: AsyncSession, data: ClientIn) -> Client:
    client = Client(id=uuid.uuid4(), **_client_fields(data))
    db.add(client)
    await db.flush()
    logger.info("Client created: %s", client.display_name)
    await _emit_client(EventType.CLIENT_CREATED, client)
    return client


async def update_client(db: AsyncSession, client: Client, data: ClientIn) -> Client:
    for name, value in _client_fields(data).items():
        setattr(client, name, value)
    await db.flush()
    logger.info("Client updated: %s", client.display_name)
    await _emit_client(EventType.CLIENT_UPDATED, client)
    return client


async def delete_client(db: AsyncSession, client: Client) -> None:
    """Delete a client that has no quotes."""
    result = await db.execute(select(func.count(Quote.id)).where(Quote.client_id == client.id))
    quotes = result.scalar() or 0
    if quotes:
        raise ClientInUseError(f"client {client.display_name} has {quotes} quote(s) and cannot be deleted")
    await db.delete(client)
    await db.flush()
    logger.info("Client deleted: %s", client.display_name)
    await _emit_client(EventType.CLIENT_DELETED, client)


def _client_fields(data: ClientIn) -> dict:
    fields = data.model_dump()
    fields["type"] = data.type.value
    return fields


async def _emit_client(event_type: EventType, client: Client) -> None:
    await emit(SystemEvent(
        event_type=event_type,
        entity_type="client",
        entity_id=client.id,
        data={"display_name": client.display_name},
        source_module="crm.clients",
    ))


# ── Projects ─────────────────────────────────────────────────────────


async def list_projects(db: AsyncSession, client_id: uuid.UUID | None = None) -> list[Project]:
    query = select(Project).options(selectinload(Project.client))
    if client_id:
        query = query.where(Project.client_id == client_id)
    result = await db.execute(query.order_by(Project.created_at.desc()))
    return list(result.scalars().all())


async def get_project(db: AsyncSession, project_id: uuid.UUID) -> Project | None:
    result = await db.execute(
        select(Project)
        .where(Project.id == project_id)
        .options(selectinload(Project.client))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_project(db: AsyncSession, data: ProjectIn) -> Project:
    project = Project(id=uuid.uuid4(), **data.model_dump())
    db.add(project)
    await db.flush()
    logger.info("Project created: %s", project.name)
    await _emit_project(EventType.PROJECT_CREATED, project)
    return project


async def update_project(db: AsyncSession, project: Project, data: ProjectIn) -> Project:
    for name, value in data.model_dump().items():
        setattr(project, name, value)
    await db.flush()
    logger.info("Project updated: %s (%d%%)", project.name, project.progress)
    await _emit_project(EventType.PROJECT_UPDATED, project)
    return project


async def delete_project(db: AsyncSession, project: Project) -> None:
    """Delete a project. Its quotes stay, detached from it."""
    result = await db.execute(select(Quote).where(Quote.project_id == project.id))
    for quote in result.scalars().all():
        quote.project_id = None
    await db.delete(project)
    await db.flush()
    logger.info("Project deleted: %s", project.name)
    await _emit_project(EventType.PROJECT_DELETED, project)


async def _emit_project(event_type: EventType, project: Project) -> None:
    await emit(SystemEvent(
        event_type=event_type,
        entity_type="project",
        entity_id=project.id,
        data={"name": project.name, "client_id": str(project.client_id)},
        source_module="crm.clients",
    ))
