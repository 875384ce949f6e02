# backend/app/api/deps.py
from __future__ import annotations

from fastapi import HTTPException

from backend.app.api.config import allow_catalog_edits


def require_catalog_edits_enabled() -> None:
    """
    Catalog edits are an administrative operation; they stay off unless
    ALLOW_CATALOG_EDITS=1. Access control itself lives in the boundary layer.
    """
    if not allow_catalog_edits():
        raise HTTPException(status_code=403, detail="catalog edits are disabled")
