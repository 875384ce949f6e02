from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.domain.contracts import ProjectionAssumptions
from backend.app.models import MonthlyPL, Projection, utcnow, uuid_str
from backend.app.services.account_mapping_service import require_company
from backend.app.services.periods import add_months, first_of_month
from backend.app.services.upserts import upsert_returning

logger = logging.getLogger(__name__)

METHOD = "moving_average_6m"
GROWTH_RATE = Decimal("1.02")  # fixed monthly compounding assumption
LOOKBACK_MONTHS = 6
HORIZON_MONTHS = 12

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class TrailingHistory:
    avg_revenue: Decimal
    avg_costs: Decimal
    months_used: int


def _dec(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def project_value(base: Decimal, offset: int) -> Decimal:
    return round_money(base * GROWTH_RATE ** offset)


def annual_growth_rate() -> Decimal:
    return (GROWTH_RATE ** 12).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)


def trailing_history(db: Session, company_id: str, as_of: date) -> TrailingHistory:
    """
    Mean revenue and mean (cogs + opex) over the P&L rows of the six months
    before as_of's month. The current month is never included.
    """
    current_month = first_of_month(as_of)
    window_start = add_months(current_month, -LOOKBACK_MONTHS)

    rows = db.execute(
        select(MonthlyPL.totals)
        .where(
            MonthlyPL.company_id == company_id,
            MonthlyPL.period_start >= window_start,
            MonthlyPL.period_start < current_month,
        )
        .order_by(MonthlyPL.period_start.desc())
        .limit(LOOKBACK_MONTHS)
    ).scalars().all()

    if not rows:
        return TrailingHistory(avg_revenue=Decimal("0"), avg_costs=Decimal("0"), months_used=0)

    revenues = [_dec(t.get("revenue")) for t in rows if (t or {}).get("revenue") is not None]
    costs = [_dec((t or {}).get("cogs")) + _dec((t or {}).get("opex")) for t in rows]

    avg_revenue = sum(revenues, Decimal("0")) / len(revenues) if revenues else Decimal("0")
    avg_costs = sum(costs, Decimal("0")) / len(costs)
    return TrailingHistory(avg_revenue=avg_revenue, avg_costs=avg_costs, months_used=len(rows))


def build_projection_rows(
    history: TrailingHistory,
    *,
    as_of: date,
    generated_at: datetime,
) -> List[Dict[str, Any]]:
    """Pure: the 12 forward rows for one snapshot."""
    current_month = first_of_month(as_of)
    confidence = "full" if history.months_used >= LOOKBACK_MONTHS else "partial"

    out: List[Dict[str, Any]] = []
    for offset in range(1, HORIZON_MONTHS + 1):
        assumptions = ProjectionAssumptions(
            method=METHOD,
            growth_rate_monthly=float(GROWTH_RATE),
            growth_rate_annual=float(annual_growth_rate()),
            base_revenue_avg=float(round_money(history.avg_revenue)),
            base_costs_avg=float(round_money(history.avg_costs)),
            historical_months_used=history.months_used,
            projection_month_offset=offset,
            confidence=confidence,
            generated_at=generated_at,
        )
        out.append(
            {
                "month": add_months(current_month, offset),
                "revenue_projection": project_value(history.avg_revenue, offset),
                "cost_projection": project_value(history.avg_costs, offset),
                "assumptions": assumptions.model_dump(mode="json"),
            }
        )
    return out


def generate_projection(db: Session, company_id: str, *, as_of: Optional[date] = None) -> int:
    """
    Write a 12-month forecast snapshot dated as_of (today, UTC, by default).

    Returns 12, or 0 when there is no P&L history in the trailing window; the
    latter writes nothing.
    """
    require_company(db, company_id)

    generated_at = utcnow()
    snapshot_date = as_of or generated_at.date()

    history = trailing_history(db, company_id, snapshot_date)
    if history.months_used == 0:
        logger.info("No historical P&L for company %s; skipping projections", company_id)
        return 0
    if history.months_used < LOOKBACK_MONTHS:
        logger.warning(
            "Only %s months of historical data for company %s; projections may be less accurate",
            history.months_used,
            company_id,
        )

    written = 0
    for row in build_projection_rows(history, as_of=snapshot_date, generated_at=generated_at):
        upsert_returning(
            db,
            Projection,
            values={
                "id": uuid_str(),
                "company_id": company_id,
                "snapshot_date": snapshot_date,
                **row,
            },
            conflict_columns=("company_id", "snapshot_date", "month"),
            update_columns=("revenue_projection", "cost_projection", "assumptions"),
        )
        written += 1
    db.commit()

    logger.info(
        "Generated %s projection rows for company %s using %s months of history",
        written,
        company_id,
        history.months_used,
    )
    return written
