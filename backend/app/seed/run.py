from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from backend.app.coa_templates import CANONICAL_CATEGORIES
from backend.app.models import Category
from backend.app.services.catalog import catalog_cache

logger = logging.getLogger(__name__)


def seed_canonical_categories(db: Session) -> int:
    """Insert the canonical categories that are missing. Existing names are left untouched."""
    existing = {r[0] for r in db.query(Category.name).all()}
    added = 0
    for position, template in enumerate(CANONICAL_CATEGORIES):
        if template["name"] in existing:
            continue
        db.add(
            Category(
                name=template["name"],
                canonical_type=template["canonical_type"],
                examples=list(template["examples"]),
                sort_order=position,
            )
        )
        added += 1
    db.commit()

    if added:
        catalog_cache.invalidate()
        logger.info("Seeded %s canonical categories", added)
    return added
