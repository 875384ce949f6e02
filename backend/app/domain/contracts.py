from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel


class PLTotals(BaseModel):
    revenue: float = 0.0
    cogs: float = 0.0
    opex: float = 0.0


class CashFlowTotals(BaseModel):
    operating: float = 0.0
    investing: float = 0.0
    financing: float = 0.0


class ProjectionAssumptions(BaseModel):
    method: str
    growth_rate_monthly: float
    growth_rate_annual: float
    base_revenue_avg: float
    base_costs_avg: float
    historical_months_used: int
    projection_month_offset: int
    confidence: Literal["full", "partial"]
    generated_at: datetime


class AggregateWriteResult(BaseModel):
    id: str
    flavor: Literal["pl", "cash_flow"]
    company_id: str
    period_start: date
    period_end: date
    row_version: int
    source_run_id: str


class MonthCloseResult(BaseModel):
    company_id: str
    period_start: date
    period_end: date
    pl_id: str
    cash_flow_id: str


class AccountMappingResult(BaseModel):
    account_id: str
    account_name: str
    category_id: str
    category_name: Optional[str] = None
    mapping_method: Literal["already_mapped", "auto_mapped"]


class UnmappedAccount(BaseModel):
    account_id: str
    account_name: str
    account_type: str
    account_subtype: Optional[str] = None


class CategoryContract(BaseModel):
    id: str
    name: str
    canonical_type: str
    examples: List[str]
