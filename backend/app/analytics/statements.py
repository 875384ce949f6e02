from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backend.app.models import MonthlyCashFlow, MonthlyPL, Projection, Transaction
from backend.app.services.account_mapping_service import require_company

logger = logging.getLogger(__name__)


def _f(x: Any, field: str = "value") -> float:
    if x is None:
        return 0.0
    try:
        return float(x)
    except (TypeError, ValueError):
        logger.warning("Malformed %s %r in stored aggregate; reporting 0", field, x)
        return 0.0


def _pct(numerator: float, revenue: float) -> float:
    if revenue > 0:
        return round(numerator / revenue * 100, 2)
    return 0.0


def _aggregate_rows(
    db: Session,
    model,
    company_id: str,
    start: Optional[date],
    end: Optional[date],
) -> Sequence:
    stmt = select(model).where(model.company_id == company_id)
    if start:
        stmt = stmt.where(model.period_start >= start)
    if end:
        stmt = stmt.where(model.period_start <= end)
    return db.execute(stmt.order_by(model.period_start.asc())).scalars().all()


def _transaction_ids_by_period(db: Session, company_id: str, rows: Sequence) -> Dict[str, List[str]]:
    """Provenance: ids of the company's transactions dated inside each row's period."""
    if not rows:
        return {}
    lo = min(r.period_start for r in rows)
    hi = max(r.period_end for r in rows)
    txns = db.execute(
        select(Transaction.id, Transaction.txn_date)
        .where(
            Transaction.company_id == company_id,
            Transaction.txn_date >= lo,
            Transaction.txn_date <= hi,
        )
        .order_by(Transaction.txn_date.asc(), Transaction.id.asc())
    ).all()

    out: Dict[str, List[str]] = {}
    for r in rows:
        out[r.id] = [tid for tid, d in txns if r.period_start <= d <= r.period_end]
    return out


def _provenance(row, txn_ids: Dict[str, List[str]]) -> Dict[str, Any]:
    return {
        "row_id": row.id,
        "row_version": row.row_version,
        "generated_at": row.generated_at,
        "source_run_id": row.source_run_id,
        "transaction_ids": txn_ids.get(row.id, []),
    }


def pl_rows(
    db: Session,
    company_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Dict[str, Any]]:
    require_company(db, company_id)
    rows = _aggregate_rows(db, MonthlyPL, company_id, start, end)
    txn_ids = _transaction_ids_by_period(db, company_id, rows)

    out: List[Dict[str, Any]] = []
    for r in rows:
        totals = r.totals or {}
        revenue = _f(totals.get("revenue"), "revenue")
        cogs = _f(totals.get("cogs"), "cogs")
        opex = _f(totals.get("opex"), "opex")
        out.append(
            {
                "start_date": r.period_start,
                "end_date": r.period_end,
                "revenue": revenue,
                "cogs": cogs,
                "opex": opex,
                "gross_profit": round(revenue - cogs, 2),
                "net_income": round(revenue - cogs - opex, 2),
                **_provenance(r, txn_ids),
            }
        )
    return out


def cash_flow_rows(
    db: Session,
    company_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Dict[str, Any]]:
    require_company(db, company_id)
    rows = _aggregate_rows(db, MonthlyCashFlow, company_id, start, end)
    txn_ids = _transaction_ids_by_period(db, company_id, rows)

    out: List[Dict[str, Any]] = []
    for r in rows:
        totals = r.totals or {}
        operating = _f(totals.get("operating"), "operating")
        investing = _f(totals.get("investing"), "investing")
        financing = _f(totals.get("financing"), "financing")
        out.append(
            {
                "start_date": r.period_start,
                "end_date": r.period_end,
                "operating_cash_flow": operating,
                "investing_cash_flow": investing,
                "financing_cash_flow": financing,
                "net_cash_flow": round(operating + investing + financing, 2),
                **_provenance(r, txn_ids),
            }
        )
    return out


def kpi_rows(
    db: Session,
    company_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """P&L rows with margins, joined to the cash-flow row of the same period_start."""
    pl = pl_rows(db, company_id, start, end)
    cf_by_start = {row["start_date"]: row for row in cash_flow_rows(db, company_id, start, end)}

    out: List[Dict[str, Any]] = []
    for row in pl:
        cf = cf_by_start.get(row["start_date"], {})
        out.append(
            {
                "period_start": row["start_date"],
                "period_end": row["end_date"],
                "revenue": row["revenue"],
                "cogs": row["cogs"],
                "opex": row["opex"],
                "gross_profit": row["gross_profit"],
                "gross_margin_pct": _pct(row["gross_profit"], row["revenue"]),
                "net_income": row["net_income"],
                "net_margin_pct": _pct(row["net_income"], row["revenue"]),
                "operating_cash_flow": cf.get("operating_cash_flow", 0.0),
                "investing_cash_flow": cf.get("investing_cash_flow", 0.0),
                "financing_cash_flow": cf.get("financing_cash_flow", 0.0),
                "row_version": row["row_version"],
                "generated_at": row["generated_at"],
                "source_run_id": row["source_run_id"],
                "transaction_ids": row["transaction_ids"],
            }
        )
    return out


def latest_projection(db: Session, company_id: str) -> Dict[str, Any]:
    require_company(db, company_id)
    snapshot_date = db.execute(
        select(func.max(Projection.snapshot_date)).where(Projection.company_id == company_id)
    ).scalar()
    if snapshot_date is None:
        return {"company_id": company_id, "snapshot_date": None, "months": []}

    rows = db.execute(
        select(Projection)
        .where(
            Projection.company_id == company_id,
            Projection.snapshot_date == snapshot_date,
        )
        .order_by(Projection.month.asc())
    ).scalars().all()

    months = []
    for p in rows:
        revenue = _f(p.revenue_projection, "revenue_projection")
        cost = _f(p.cost_projection, "cost_projection")
        months.append(
            {
                "month": p.month,
                "revenue_projection": revenue,
                "cost_projection": cost,
                "net_projection": round(revenue - cost, 2),
                "method": (p.assumptions or {}).get("method"),
                "assumptions": p.assumptions or {},
            }
        )
    return {"company_id": company_id, "snapshot_date": snapshot_date, "months": months}
