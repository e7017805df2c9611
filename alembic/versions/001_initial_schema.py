"""Initial schema — companies, clients, projects, quotes, line items, invoices, audit log.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from __future__ import annotations

from typing import Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, tuple[str, ...], None] = None
depends_on: Union[str, tuple[str, ...], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    # ── Standalone tables (no FKs) ─────────────────────────────────────

    op.create_table(
        "audit_log",
        sa.Column("event_type", sa.String(100), nullable=False, index=True),
        sa.Column("entity_type", sa.String(50), comment="quote, invoice, client..."),
        sa.Column("entity_id", postgresql.UUID(as_uuid=True), index=True),
        sa.Column("actor_id", sa.String(100), comment="User ID or 'system'"),
        sa.Column("data", postgresql.JSONB(astext_type=sa.Text())),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "companies",
        sa.Column("company_name", sa.String(200)),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(30)),
        sa.Column("address", sa.String(500)),
        sa.Column("website", sa.String(255)),
        sa.Column("logo", sa.Text(), comment="Logo URL or data URI"),
        sa.Column("primary_color", sa.String(50)),
        sa.Column("siret", sa.String(14)),
        sa.Column("rcs", sa.String(100)),
        sa.Column("naf", sa.String(10), comment="APE/NAF activity code"),
        sa.Column("vat_number", sa.String(20)),
        sa.Column("capital_social", sa.String(50)),
        sa.Column("decennale_insurance", sa.String(500)),
        sa.Column("biennale_insurance", sa.String(500)),
        sa.Column("legal_mentions", sa.Text()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "clients",
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("company_name", sa.String(200)),
        sa.Column("siret", sa.String(14)),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(30)),
        sa.Column("address", sa.String(500)),
        sa.Column("city", sa.String(100)),
        sa.Column("zip_code", sa.String(10)),
        sa.Column("country", sa.String(100)),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    # ── Tables with FKs ────────────────────────────────────────────────

    op.create_table(
        "projects",
        sa.Column("client_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("clients.id"), nullable=False, index=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("address", sa.String(500)),
        sa.Column("city", sa.String(100)),
        sa.Column("zip_code", sa.String(10)),
        sa.Column("country", sa.String(100)),
        sa.Column("start_date", sa.Date()),
        sa.Column("end_date", sa.Date()),
        sa.Column("progress", sa.Integer(), comment="Completion percentage 0-100"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "quotes",
        sa.Column("client_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("clients.id"), nullable=False, index=True),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), index=True),
        sa.Column("number", sa.String(50), nullable=False, unique=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("valid_until", sa.Date()),
        sa.Column("notes", sa.Text()),
        sa.Column("conditions", sa.Text()),
        sa.Column("total_excl_tax", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_tax", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_incl_tax", sa.Numeric(10, 2), nullable=False),
        sa.Column("deposit_percent", sa.Integer(), nullable=False),
        sa.Column("deposit_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "quote_line_items",
        sa.Column(
            "quote_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("quotes.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("kind", sa.String(20), nullable=False, comment="LineItemKind enum value"),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("label", sa.String(500)),
        sa.Column("body", sa.Text()),
        sa.Column("quantity", sa.Numeric(10, 2)),
        sa.Column("unit", sa.String(20)),
        sa.Column("unit_price", sa.Numeric(10, 2)),
        sa.Column("tax_rate_percent", sa.Numeric(5, 2)),
        sa.Column("line_total_excl_tax", sa.Numeric(10, 2)),
        sa.Column("technical_details", postgresql.JSONB(astext_type=sa.Text()), comment="Material and work rows only"),
        sa.Column("section_subtotal", sa.Numeric(10, 2)),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "invoices",
        sa.Column("quote_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("quotes.id"), nullable=False, index=True),
        sa.Column("client_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("clients.id"), nullable=False, index=True),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id")),
        sa.Column("number", sa.String(50), nullable=False, unique=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date()),
        sa.Column("total_excl_tax", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_tax", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_incl_tax", sa.Numeric(10, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(10, 2), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_table("invoices")
    op.drop_table("quote_line_items")
    op.drop_table("quotes")
    op.drop_table("projects")
    op.drop_table("clients")
    op.drop_table("companies")
    op.drop_table("audit_log")
