from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backend.app.domain.contracts import (
    AggregateWriteResult,
    CashFlowTotals,
    MonthCloseResult,
    PLTotals,
)
from backend.app.models import (
    Account,
    Category,
    MonthlyCashFlow,
    MonthlyPL,
    Transaction,
    utcnow,
    uuid_str,
)
from backend.app.services.account_mapping_service import require_company
from backend.app.services.errors import InvalidArgument
from backend.app.services.periods import month_bounds
from backend.app.services.upserts import upsert_returning

logger = logging.getLogger(__name__)

PL_CANONICAL_TYPES = ("revenue", "cogs", "opex")

# Cash flow buckets by the account's declared (source) type, not its category.
CASH_FLOW_ACCOUNT_TYPES: Dict[str, Tuple[str, ...]] = {
    "operating": ("Income", "Expense", "Other Income", "Other Expense", "Cost of Goods Sold"),
    "investing": ("Fixed Asset", "Other Asset"),
    "financing": ("Long Term Liability", "Equity"),
}

_CONFLICT_COLUMNS = ("company_id", "period_start")
_OVERWRITE_COLUMNS = ("period_end", "totals", "generated_at", "source_run_id")


def _as_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    return value


def validate_period_request(
    company_id: Optional[str],
    period_start: Optional[date],
    period_end: Optional[date],
    run_id: Optional[str],
) -> None:
    if not company_id:
        raise InvalidArgument("company_id cannot be NULL")
    if period_start is None or period_end is None:
        raise InvalidArgument("period_start and period_end cannot be NULL")
    if period_start > period_end:
        raise InvalidArgument("period_start must be before or equal to period_end")
    if run_id is None or not str(run_id).strip():
        raise InvalidArgument("source_run_id cannot be NULL or empty")


def _money(value: Any) -> float:
    if value is None:
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0.01")))


def compute_pl_totals(db: Session, company_id: str, period_start: date, period_end: date) -> PLTotals:
    """
    Sum signed amounts per canonical type of the account's resolved category.

    Transactions on accounts without a category (or without an account) are
    not counted anywhere.
    """
    rows = db.execute(
        select(Category.canonical_type, func.sum(Transaction.amount))
        .select_from(Transaction)
        .join(Account, Transaction.account_id == Account.id)
        .join(Category, Account.mapping_category_id == Category.id)
        .where(
            Transaction.company_id == company_id,
            Transaction.txn_date >= period_start,
            Transaction.txn_date <= period_end,
            Category.canonical_type.in_(PL_CANONICAL_TYPES),
        )
        .group_by(Category.canonical_type)
    ).all()

    sums = {canonical_type: _money(total) for canonical_type, total in rows}
    return PLTotals(**{t: sums.get(t, 0.0) for t in PL_CANONICAL_TYPES})


def compute_cash_flow_totals(db: Session, company_id: str, period_start: date, period_end: date) -> CashFlowTotals:
    tracked = [t for types in CASH_FLOW_ACCOUNT_TYPES.values() for t in types]
    rows = db.execute(
        select(Account.type, func.sum(Transaction.amount))
        .select_from(Transaction)
        .join(Account, Transaction.account_id == Account.id)
        .where(
            Transaction.company_id == company_id,
            Transaction.txn_date >= period_start,
            Transaction.txn_date <= period_end,
            Account.type.in_(tracked),
        )
        .group_by(Account.type)
    ).all()
    by_type = {account_type: Decimal(str(total or 0)) for account_type, total in rows}

    totals: Dict[str, float] = {}
    for bucket, types in CASH_FLOW_ACCOUNT_TYPES.items():
        totals[bucket] = _money(sum((by_type.get(t, Decimal("0")) for t in types), Decimal("0")))
    return CashFlowTotals(**totals)


def _write_aggregate(
    db: Session,
    model,
    *,
    flavor: str,
    company_id: str,
    period_start: date,
    period_end: date,
    totals: Dict[str, float],
    run_id: str,
) -> AggregateWriteResult:
    row = upsert_returning(
        db,
        model,
        values={
            "id": uuid_str(),
            "company_id": company_id,
            "period_start": period_start,
            "period_end": period_end,
            "totals": totals,
            "row_version": 1,
            "generated_at": utcnow(),
            "source_run_id": run_id,
        },
        conflict_columns=_CONFLICT_COLUMNS,
        update_columns=_OVERWRITE_COLUMNS,
        bump_version=True,
    )
    db.commit()

    aggregate_id, row_version = row[0], row[1]
    logger.info(
        "Wrote %s aggregate company=%s period=%s..%s version=%s run=%s",
        flavor,
        company_id,
        period_start,
        period_end,
        row_version,
        run_id,
    )
    return AggregateWriteResult(
        id=aggregate_id,
        flavor=flavor,
        company_id=company_id,
        period_start=period_start,
        period_end=period_end,
        row_version=row_version,
        source_run_id=run_id,
    )


def write_monthly_pl(
    db: Session,
    company_id: str,
    period_start: date,
    period_end: date,
    run_id: str,
) -> AggregateWriteResult:
    period_start, period_end = _as_date(period_start), _as_date(period_end)
    validate_period_request(company_id, period_start, period_end, run_id)
    require_company(db, company_id)

    totals = compute_pl_totals(db, company_id, period_start, period_end)
    return _write_aggregate(
        db,
        MonthlyPL,
        flavor="pl",
        company_id=company_id,
        period_start=period_start,
        period_end=period_end,
        totals=totals.model_dump(),
        run_id=run_id,
    )


def write_monthly_cash_flow(
    db: Session,
    company_id: str,
    period_start: date,
    period_end: date,
    run_id: str,
) -> AggregateWriteResult:
    period_start, period_end = _as_date(period_start), _as_date(period_end)
    validate_period_request(company_id, period_start, period_end, run_id)
    require_company(db, company_id)

    totals = compute_cash_flow_totals(db, company_id, period_start, period_end)
    return _write_aggregate(
        db,
        MonthlyCashFlow,
        flavor="cash_flow",
        company_id=company_id,
        period_start=period_start,
        period_end=period_end,
        totals=totals.model_dump(),
        run_id=run_id,
    )


def generate_monthly_pl(
    db: Session,
    company_id: str,
    period_start: date,
    period_end: date,
    run_id: str,
) -> str:
    return write_monthly_pl(db, company_id, period_start, period_end, run_id).id


def generate_monthly_cash_flow(
    db: Session,
    company_id: str,
    period_start: date,
    period_end: date,
    run_id: str,
) -> str:
    return write_monthly_cash_flow(db, company_id, period_start, period_end, run_id).id


def generate_monthly_statements(
    db: Session,
    company_id: str,
    month: date,
    run_id: str,
) -> MonthCloseResult:
    """Run both aggregations for the calendar month containing `month`."""
    if month is None:
        raise InvalidArgument("month cannot be NULL")
    period_start, period_end = month_bounds(_as_date(month))
    validate_period_request(company_id, period_start, period_end, run_id)

    pl = write_monthly_pl(db, company_id, period_start, period_end, run_id)
    cf = write_monthly_cash_flow(db, company_id, period_start, period_end, run_id)
    return MonthCloseResult(
        company_id=company_id,
        period_start=period_start,
        period_end=period_end,
        pl_id=pl.id,
        cash_flow_id=cf.id,
    )
