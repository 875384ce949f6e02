from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.db import Base


# -------------------------
# Helpers
# -------------------------

CANONICAL_TYPES = ("revenue", "cogs", "opex", "asset", "liability", "equity")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def uuid_str() -> str:
    return str(uuid.uuid4())


# -------------------------
# Tenants + reference data
# -------------------------

class Company(Base):
    __tablename__ = "companies"
    __table_args__ = (
        Index("ix_companies_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    org_metadata: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    accounts = relationship(
        "Account",
        back_populates="company",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Category(Base):
    """
    Canonical financial category shared by every company.
    canonical_type: revenue | cogs | opex | asset | liability | equity
    examples: source account names that match this category, in match order.
    """
    __tablename__ = "categories"
    __table_args__ = (
        Index("ix_categories_canonical_type", "canonical_type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    canonical_type: Mapped[str] = mapped_column(String(20), nullable=False)
    examples: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    # catalog order; the resolver breaks ties by it
    sort_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )


class Account(Base):
    """
    Chart of accounts item from the upstream accounting system.
    type/subtype keep the source taxonomy verbatim (e.g. "Other Current Asset").
    """
    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("company_id", "external_account_id", name="uq_accounts_company_external"),
        Index("ix_accounts_company_id", "company_id"),
        Index("ix_accounts_mapping_category_id", "mapping_category_id"),
        Index("ix_accounts_type", "type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    company_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    external_account_id: Mapped[str] = mapped_column(String(120), nullable=False)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(60), nullable=False)
    subtype: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)

    mapping_category_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("categories.id"),
        nullable=True,
    )

    company = relationship("Company", back_populates="accounts")
    category = relationship("Category")


class Transaction(Base):
    """
    Immutable ingested transaction. Amount is signed as delivered upstream.
    """
    __tablename__ = "raw_transactions"
    __table_args__ = (
        UniqueConstraint("company_id", "external_txn_id", name="uq_raw_txn_company_external"),
        Index("ix_raw_txn_company_date", "company_id", "date"),
        Index("ix_raw_txn_account_id", "account_id"),
        Index("ix_raw_txn_source_run_id", "source_run_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    company_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    external_txn_id: Mapped[str] = mapped_column(String(120), nullable=False)
    txn_type: Mapped[str] = mapped_column(String(60), nullable=False)
    txn_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    account_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("accounts.id"),
        nullable=True,
    )

    raw_payload: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    ingested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    source_run_id: Mapped[str] = mapped_column(String(120), nullable=False)

    account = relationship("Account")


# -------------------------
# Derived tables (upserted, never deleted)
# -------------------------

class MonthlyPL(Base):
    __tablename__ = "monthly_pl"
    __table_args__ = (
        UniqueConstraint("company_id", "period_start", name="uq_monthly_pl_company_period"),
        Index("ix_monthly_pl_source_run_id", "source_run_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    company_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)

    # {"revenue": .., "cogs": .., "opex": ..}
    totals: Mapped[dict] = mapped_column(JSON, nullable=False)

    row_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default=text("1"))
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    source_run_id: Mapped[str] = mapped_column(String(120), nullable=False)


class MonthlyCashFlow(Base):
    __tablename__ = "monthly_cash_flow"
    __table_args__ = (
        UniqueConstraint("company_id", "period_start", name="uq_monthly_cash_flow_company_period"),
        Index("ix_monthly_cash_flow_source_run_id", "source_run_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    company_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)

    # {"operating": .., "investing": .., "financing": ..}
    totals: Mapped[dict] = mapped_column(JSON, nullable=False)

    row_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default=text("1"))
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    source_run_id: Mapped[str] = mapped_column(String(120), nullable=False)


class Projection(Base):
    __tablename__ = "projections_12m"
    __table_args__ = (
        UniqueConstraint("company_id", "snapshot_date", "month", name="uq_projections_company_snapshot_month"),
        Index("ix_projections_company_snapshot", "company_id", "snapshot_date"),
        Index("ix_projections_month", "month"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    company_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    snapshot_date: Mapped[date] = mapped_column(Date, nullable=False)
    month: Mapped[date] = mapped_column(Date, nullable=False)

    revenue_projection: Mapped[Optional[Decimal]] = mapped_column(Numeric(15, 2), nullable=True)
    cost_projection: Mapped[Optional[Decimal]] = mapped_column(Numeric(15, 2), nullable=True)
    assumptions: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

