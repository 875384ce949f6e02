"""initial statements schema

Revision ID: 0a1f3c9e7b21
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import text


# revision identifiers, used by Alembic.
revision: str = "0a1f3c9e7b21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _aggregate_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("totals", sa.JSON(), nullable=False),
        sa.Column("row_version", sa.Integer(), nullable=False, server_default=text("1")),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("source_run_id", sa.String(length=120), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "period_start", name=f"uq_{name}_company_period"),
    )
    op.create_index(f"ix_{name}_source_run_id", name, ["source_run_id"], unique=False)


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("org_metadata", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_companies_created_at", "companies", ["created_at"], unique=False)

    op.create_table(
        "categories",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("canonical_type", sa.String(length=20), nullable=False),
        sa.Column("examples", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=text("0")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_categories_canonical_type", "categories", ["canonical_type"], unique=False)

    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("external_account_id", sa.String(length=120), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", sa.String(length=60), nullable=False),
        sa.Column("subtype", sa.String(length=60), nullable=True),
        sa.Column("mapping_category_id", sa.String(length=36), nullable=True),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["mapping_category_id"], ["categories.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "external_account_id", name="uq_accounts_company_external"),
    )
    op.create_index("ix_accounts_company_id", "accounts", ["company_id"], unique=False)
    op.create_index("ix_accounts_mapping_category_id", "accounts", ["mapping_category_id"], unique=False)
    op.create_index("ix_accounts_type", "accounts", ["type"], unique=False)

    op.create_table(
        "raw_transactions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("external_txn_id", sa.String(length=120), nullable=False),
        sa.Column("txn_type", sa.String(length=60), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("account_id", sa.String(length=36), nullable=True),
        sa.Column("raw_payload", sa.JSON(), nullable=False),
        sa.Column("ingested_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("source_run_id", sa.String(length=120), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "external_txn_id", name="uq_raw_txn_company_external"),
    )
    op.create_index("ix_raw_txn_company_date", "raw_transactions", ["company_id", "date"], unique=False)
    op.create_index("ix_raw_txn_account_id", "raw_transactions", ["account_id"], unique=False)
    op.create_index("ix_raw_txn_source_run_id", "raw_transactions", ["source_run_id"], unique=False)

    _aggregate_table("monthly_pl")
    _aggregate_table("monthly_cash_flow")

    op.create_table(
        "projections_12m",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.String(length=36), nullable=False),
        sa.Column("snapshot_date", sa.Date(), nullable=False),
        sa.Column("month", sa.Date(), nullable=False),
        sa.Column("revenue_projection", sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column("cost_projection", sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column("assumptions", sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "snapshot_date", "month", name="uq_projections_company_snapshot_month"),
    )
    op.create_index("ix_projections_company_snapshot", "projections_12m", ["company_id", "snapshot_date"], unique=False)
    op.create_index("ix_projections_month", "projections_12m", ["month"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_projections_month", table_name="projections_12m")
    op.drop_index("ix_projections_company_snapshot", table_name="projections_12m")
    op.drop_table("projections_12m")

    for name in ("monthly_cash_flow", "monthly_pl"):
        op.drop_index(f"ix_{name}_source_run_id", table_name=name)
        op.drop_table(name)

    op.drop_index("ix_raw_txn_source_run_id", table_name="raw_transactions")
    op.drop_index("ix_raw_txn_account_id", table_name="raw_transactions")
    op.drop_index("ix_raw_txn_company_date", table_name="raw_transactions")
    op.drop_table("raw_transactions")

    op.drop_index("ix_accounts_type", table_name="accounts")
    op.drop_index("ix_accounts_mapping_category_id", table_name="accounts")
    op.drop_index("ix_accounts_company_id", table_name="accounts")
    op.drop_table("accounts")

    op.drop_index("ix_categories_canonical_type", table_name="categories")
    op.drop_table("categories")

    op.drop_index("ix_companies_created_at", table_name="companies")
    op.drop_table("companies")
