from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.db import get_db
from backend.app.domain.contracts import AggregateWriteResult, MonthCloseResult
from backend.app.services import aggregation_service

router = APIRouter(prefix="/api/companies/{company_id}/aggregates", tags=["aggregates"])


# Bounds and run_id are optional here so missing values reach the service
# validation and come back as 400 like every other invalid request.
class PeriodRunIn(BaseModel):
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    run_id: Optional[str] = None


class MonthRunIn(BaseModel):
    month: Optional[date] = None
    run_id: Optional[str] = None


@router.post("/pl", response_model=AggregateWriteResult)
def generate_monthly_pl(company_id: str, req: PeriodRunIn, db: Session = Depends(get_db)):
    return aggregation_service.write_monthly_pl(
        db,
        company_id,
        req.period_start,
        req.period_end,
        req.run_id,
    )


@router.post("/cash-flow", response_model=AggregateWriteResult)
def generate_monthly_cash_flow(company_id: str, req: PeriodRunIn, db: Session = Depends(get_db)):
    return aggregation_service.write_monthly_cash_flow(
        db,
        company_id,
        req.period_start,
        req.period_end,
        req.run_id,
    )


@router.post("/month", response_model=MonthCloseResult)
def generate_month(company_id: str, req: MonthRunIn, db: Session = Depends(get_db)):
    return aggregation_service.generate_monthly_statements(db, company_id, req.month, req.run_id)
