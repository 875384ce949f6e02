from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from backend.app.api.deps import require_catalog_edits_enabled
from backend.app.db import get_db
from backend.app.domain.contracts import CategoryContract
from backend.app.services import catalog

router = APIRouter(prefix="/api/categories", tags=["catalog"])


class CategoryUpsertIn(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    canonical_type: str
    examples: List[str] = Field(default_factory=list)
    sort_order: Optional[int] = None


@router.get("", response_model=List[CategoryContract])
def list_categories(db: Session = Depends(get_db)):
    return [CategoryContract(**item) for item in catalog.list_categories(db)]


@router.put(
    "",
    response_model=CategoryContract,
    dependencies=[Depends(require_catalog_edits_enabled)],
)
def upsert_category(req: CategoryUpsertIn, db: Session = Depends(get_db)):
    cat = catalog.upsert_category(
        db,
        name=req.name,
        canonical_type=req.canonical_type,
        examples=req.examples,
        sort_order=req.sort_order,
    )
    return CategoryContract(
        id=cat.id,
        name=cat.name,
        canonical_type=cat.canonical_type,
        examples=list(cat.examples or []),
    )
