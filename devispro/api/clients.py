"""Client and project API."""
# ruff: noqa: B008

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from devispro.crm import clients as crm
from devispro.db.engine import get_session
from devispro.models.client import Client
from devispro.models.project import Project
from devispro.schemas.clients import ClientIn, ClientOut, ProjectIn, ProjectOut

router = APIRouter(prefix="/api", tags=["clients"])


async def _client(db: AsyncSession, client_id: uuid.UUID) -> Client:
    client = await crm.get_client(db, client_id)
    if client is None:
        raise HTTPException(status_code=404, detail=f"Client {client_id} not found")
    return client


async def _project(db: AsyncSession, project_id: uuid.UUID) -> Project:
    project = await crm.get_project(db, project_id)
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")
    return project


# ── Clients ──────────────────────────────────────────────────────────


@router.get("/clients", response_model=list[ClientOut])
async def get_clients(
    search: str | None = Query(default=None, max_length=100),
    db: AsyncSession = Depends(get_session),
) -> list[Client]:
    return await crm.list_clients(db, search)


@router.post("/clients", response_model=ClientOut, status_code=201)
async def post_client(data: ClientIn, db: AsyncSession = Depends(get_session)) -> Client:
    return await crm.create_client(db, data)


@router.get("/clients/{client_id}", response_model=ClientOut)
async def get_client(client_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> Client:
    return await _client(db, client_id)


@router.put("/clients/{client_id}", response_model=ClientOut)
async def put_client(client_id: uuid.UUID, data: ClientIn, db: AsyncSession = Depends(get_session)) -> Client:
    return await crm.update_client(db, await _client(db, client_id), data)


@router.delete("/clients/{client_id}", status_code=204)
async def delete_client(client_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> None:
    await crm.delete_client(db, await _client(db, client_id))


# ── Projects ─────────────────────────────────────────────────────────


@router.get("/projects", response_model=list[ProjectOut])
async def get_projects(
    client_id: uuid.UUID | None = Query(default=None, alias="clientId"),
    db: AsyncSession = Depends(get_session),
) -> list[Project]:
    return await crm.list_projects(db, client_id)


@router.post("/projects", response_model=ProjectOut, status_code=201)
async def post_project(data: ProjectIn, db: AsyncSession = Depends(get_session)) -> Project:
    await _client(db, data.client_id)
    project = await crm.create_project(db, data)
    return await _project(db, project.id)


@router.get("/projects/{project_id}", response_model=ProjectOut)
async def get_project(project_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> Project:
    return await _project(db, project_id)


@router.put("/projects/{project_id}", response_model=ProjectOut)
async def put_project(project_id: uuid.UUID, data: ProjectIn, db: AsyncSession = Depends(get_session)) -> Project:
    await crm.update_project(db, await _project(db, project_id), data)
    return await _project(db, project_id)


@router.delete("/projects/{project_id}", status_code=204)
async def delete_project(project_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> None:
    await crm.delete_project(db, await _project(db, project_id))
