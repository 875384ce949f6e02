from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from backend.app.api.config import allow_catalog_edits, log_level, seed_catalog_on_startup

router = APIRouter(prefix="/api", tags=["config"])


class ConfigOut(BaseModel):
    allow_catalog_edits: bool
    seed_catalog_on_startup: bool
    log_level: str


@router.get("/config", response_model=ConfigOut)
def get_config() -> ConfigOut:
    return ConfigOut(
        allow_catalog_edits=allow_catalog_edits(),
        seed_catalog_on_startup=seed_catalog_on_startup(),
        log_level=log_level(),
    )
