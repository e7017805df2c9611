"""Tests for client, project and company services, and dashboard stats."""

from __future__ import annotations

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from devispro.crm import clients as crm
from devispro.crm import company as company_service
from devispro.crm.clients import ClientInUseError
from devispro.models.client import Client
from devispro.models.company import Company
from devispro.models.enums import ClientType
from devispro.models.project import Project
from devispro.models.quote import Quote
from devispro.quotes.queries import get_dashboard_stats
from devispro.quotes.service import QuoteStateError
from devispro.schemas.clients import ClientIn, ProjectIn
from devispro.schemas.company import CompanyIn
from devispro.schemas.events import EventType


def _db_with(*results: MagicMock) -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    db.execute = AsyncMock(side_effect=list(results))
    return db


def _scalar(value: object) -> MagicMock:
    result = MagicMock()
    result.scalar.return_value = value
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def mock_emit():
    with (
        patch("devispro.crm.clients.emit", new_callable=AsyncMock) as clients_emit,
        patch("devispro.crm.company.emit", new_callable=AsyncMock) as company_emit,
    ):
        yield {"clients": clients_emit, "company": company_emit}


class TestClients:
    def test_display_name(self):
        person = Client(type=ClientType.INDIVIDUAL.value, first_name="Paul", last_name="Martin")
        firm = Client(type=ClientType.COMPANY.value, company_name="SCI Les Tilleuls", first_name="Ignored")
        only_last = Client(type=ClientType.INDIVIDUAL.value, last_name="Durand")

        assert person.display_name == "Paul Martin"
        assert firm.display_name == "SCI Les Tilleuls"
        assert only_last.display_name == "Durand"

    @pytest.mark.asyncio()
    async def test_create_client(self, mock_emit):
        db = _db_with()
        data = ClientIn(type="company", company_name="Boulangerie Roux", email="contact@roux.fr")

        client = await crm.create_client(db, data)

        assert client.type == "company"
        assert client.country == "France"
        db.add.assert_called_once_with(client)
        db.flush.assert_awaited_once()
        event = mock_emit["clients"].call_args[0][0]
        assert event.event_type == EventType.CLIENT_CREATED
        assert event.data["display_name"] == "Boulangerie Roux"

    @pytest.mark.asyncio()
    async def test_update_client(self, mock_emit):
        db = _db_with()
        client = Client(id=uuid.uuid4(), type="individual", first_name="Paul", last_name="Martin")

        await crm.update_client(db, client, ClientIn(first_name="Paul", last_name="Moreau", city="Lyon"))

        assert client.last_name == "Moreau"
        assert client.city == "Lyon"
        assert mock_emit["clients"].call_args[0][0].event_type == EventType.CLIENT_UPDATED

    @pytest.mark.asyncio()
    async def test_delete_client_with_quotes_refused(self, mock_emit):
        db = _db_with(_scalar(2))
        client = Client(id=uuid.uuid4(), type="individual", first_name="Paul", last_name="Martin")

        with pytest.raises(ClientInUseError, match="2 quote"):
            await crm.delete_client(db, client)

        db.delete.assert_not_awaited()
        mock_emit["clients"].assert_not_awaited()

    def test_client_in_use_maps_like_a_business_rule(self):
        assert issubclass(ClientInUseError, QuoteStateError)

    @pytest.mark.asyncio()
    async def test_delete_client_without_quotes(self, mock_emit):
        db = _db_with(_scalar(0))
        client = Client(id=uuid.uuid4(), type="individual", first_name="Paul", last_name="Martin")

        await crm.delete_client(db, client)

        db.delete.assert_awaited_once_with(client)
        assert mock_emit["clients"].call_args[0][0].event_type == EventType.CLIENT_DELETED


class TestProjects:
    def test_progress_range(self):
        with pytest.raises(ValueError):
            ProjectIn(client_id=uuid.uuid4(), name="Extension", progress=120)

    @pytest.mark.asyncio()
    async def test_create_project(self, mock_emit):
        db = _db_with()
        client_id = uuid.uuid4()

        project = await crm.create_project(db, ProjectIn(client_id=client_id, name="Rénovation cuisine", progress=10))

        assert project.client_id == client_id
        assert project.progress == 10
        event = mock_emit["clients"].call_args[0][0]
        assert event.event_type == EventType.PROJECT_CREATED
        assert event.data["client_id"] == str(client_id)

    @pytest.mark.asyncio()
    async def test_delete_project_detaches_quotes(self, mock_emit):
        project = Project(id=uuid.uuid4(), client_id=uuid.uuid4(), name="Toiture", progress=0)
        quotes = [Quote(id=uuid.uuid4(), project_id=project.id), Quote(id=uuid.uuid4(), project_id=project.id)]
        result = MagicMock()
        result.scalars.return_value.all.return_value = quotes
        db = _db_with(result)

        await crm.delete_project(db, project)

        assert all(q.project_id is None for q in quotes)
        db.delete.assert_awaited_once_with(project)
        assert mock_emit["clients"].call_args[0][0].event_type == EventType.PROJECT_DELETED


class TestCompany:
    @pytest.mark.asyncio()
    async def test_created_on_first_use(self, mock_emit):
        db = _db_with(_scalar(None))

        company = await company_service.get_or_create_company(db)

        assert company.company_name
        db.add.assert_called_once_with(company)

    @pytest.mark.asyncio()
    async def test_update_only_sent_fields(self, mock_emit):
        existing = Company(id=uuid.uuid4(), company_name="Martin Bâtiment", siret="12345678900012")
        db = _db_with(_scalar(existing))

        company = await company_service.update_company(db, CompanyIn(phone="04 78 00 00 00"))

        assert company is existing
        assert company.phone == "04 78 00 00 00"
        assert company.siret == "12345678900012"
        event = mock_emit["company"].call_args[0][0]
        assert event.event_type == EventType.COMPANY_UPDATED
        assert event.data["fields"] == ["phone"]


class TestDashboardStats:
    @pytest.mark.asyncio()
    async def test_counts_and_revenue(self):
        counts = MagicMock()
        counts.all.return_value = [("draft", 3), ("sent", 4), ("signed", 2), ("rejected", 1)]
        db = _db_with(counts, _scalar(Decimal("15250.5")))

        stats = await get_dashboard_stats(db)

        assert stats.total_quotes == 10
        assert stats.pending_quotes == 4
        assert stats.accepted_quotes == 2
        assert stats.total_revenue == Decimal("15250.50")

    @pytest.mark.asyncio()
    async def test_empty(self):
        counts = MagicMock()
        counts.all.return_value = []
        db = _db_with(counts, _scalar(0))

        stats = await get_dashboard_stats(db)

        assert stats.total_quotes == 0
        assert stats.total_revenue == Decimal("0.00")
