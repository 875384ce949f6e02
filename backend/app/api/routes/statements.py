from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.params import Query as QueryParam
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.analytics import statements
from backend.app.db import get_db

router = APIRouter(prefix="/api/companies/{company_id}/statements", tags=["statements"])


class ProvenanceOut(BaseModel):
    row_id: str
    row_version: int
    generated_at: datetime
    source_run_id: str
    transaction_ids: List[str]


class PLRowOut(ProvenanceOut):
    start_date: date
    end_date: date
    revenue: float
    cogs: float
    opex: float
    gross_profit: float
    net_income: float


class CashFlowRowOut(ProvenanceOut):
    start_date: date
    end_date: date
    operating_cash_flow: float
    investing_cash_flow: float
    financing_cash_flow: float
    net_cash_flow: float


class KPIRowOut(BaseModel):
    period_start: date
    period_end: date
    revenue: float
    cogs: float
    opex: float
    gross_profit: float
    gross_margin_pct: float
    net_income: float
    net_margin_pct: float
    operating_cash_flow: float
    investing_cash_flow: float
    financing_cash_flow: float
    row_version: int
    generated_at: datetime
    source_run_id: str
    transaction_ids: List[str]


def _range(start_date, end_date):
    if isinstance(start_date, QueryParam):
        start_date = None
    if isinstance(end_date, QueryParam):
        end_date = None
    return start_date, end_date


@router.get("/pl", response_model=List[PLRowOut])
def pl_statement(
    company_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    start_date, end_date = _range(start_date, end_date)
    return [PLRowOut(**row) for row in statements.pl_rows(db, company_id, start_date, end_date)]


@router.get("/cash-flow", response_model=List[CashFlowRowOut])
def cash_flow_statement(
    company_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    start_date, end_date = _range(start_date, end_date)
    return [CashFlowRowOut(**row) for row in statements.cash_flow_rows(db, company_id, start_date, end_date)]


@router.get("/kpis", response_model=List[KPIRowOut])
def kpis(
    company_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    start_date, end_date = _range(start_date, end_date)
    return [KPIRowOut(**row) for row in statements.kpi_rows(db, company_id, start_date, end_date)]
