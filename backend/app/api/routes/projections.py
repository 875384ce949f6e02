from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.analytics import statements
from backend.app.db import get_db
from backend.app.services import projection_service

router = APIRouter(prefix="/api/companies/{company_id}/projections", tags=["projections"])


class ProjectionRunOut(BaseModel):
    company_id: str
    rows_written: int


class ProjectionMonthOut(BaseModel):
    month: date
    revenue_projection: float
    cost_projection: float
    net_projection: float
    method: Optional[str] = None
    assumptions: Dict[str, Any]


class ProjectionSnapshotOut(BaseModel):
    company_id: str
    snapshot_date: Optional[date] = None
    months: List[ProjectionMonthOut]


@router.post("", response_model=ProjectionRunOut)
def generate_projection(company_id: str, db: Session = Depends(get_db)):
    written = projection_service.generate_projection(db, company_id)
    return ProjectionRunOut(company_id=company_id, rows_written=written)


@router.get("/latest", response_model=ProjectionSnapshotOut)
def latest_projection(company_id: str, db: Session = Depends(get_db)):
    return ProjectionSnapshotOut(**statements.latest_projection(db, company_id))
