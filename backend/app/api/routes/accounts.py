from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.db import get_db
from backend.app.domain.contracts import AccountMappingResult, UnmappedAccount
from backend.app.services import account_mapping_service
from backend.app.services.category_resolver import resolve_account_category

router = APIRouter(prefix="/api", tags=["accounts"])


class ResolveOut(BaseModel):
    account_id: str
    category_id: str


class MappingIn(BaseModel):
    category_id: str


class MappingOut(BaseModel):
    account_id: str
    category_id: str
    success: bool


@router.post("/accounts/{account_id}/resolve", response_model=ResolveOut)
def resolve_account(account_id: str, db: Session = Depends(get_db)):
    category_id = resolve_account_category(db, account_id)
    return ResolveOut(account_id=account_id, category_id=category_id)


@router.put("/accounts/{account_id}/mapping", response_model=MappingOut)
def set_account_mapping(account_id: str, req: MappingIn, db: Session = Depends(get_db)):
    ok = account_mapping_service.set_account_mapping(db, account_id, req.category_id)
    return MappingOut(account_id=account_id, category_id=req.category_id, success=ok)


@router.post("/companies/{company_id}/accounts/map", response_model=List[AccountMappingResult])
def map_company_accounts(company_id: str, db: Session = Depends(get_db)):
    return [
        AccountMappingResult(**item)
        for item in account_mapping_service.map_company_accounts(db, company_id)
    ]


@router.get("/companies/{company_id}/accounts/unmapped", response_model=List[UnmappedAccount])
def get_unmapped_accounts(company_id: str, db: Session = Depends(get_db)):
    return [
        UnmappedAccount(**item)
        for item in account_mapping_service.get_unmapped_accounts(db, company_id)
    ]
