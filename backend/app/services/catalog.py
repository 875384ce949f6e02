from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backend.app.models import CANONICAL_TYPES, Category
from backend.app.services.errors import ConflictViolation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogCategory:
    id: str
    name: str
    canonical_type: str
    examples: Tuple[str, ...]


@dataclass(frozen=True)
class CategoryCatalog:
    """
    Immutable snapshot of the category table, in catalog order.

    The resolver only ever sees one of these; it never reads the table itself.
    """
    categories: Tuple[CatalogCategory, ...]

    def __iter__(self):
        return iter(self.categories)

    def __len__(self) -> int:
        return len(self.categories)

    def get(self, category_id: str) -> Optional[CatalogCategory]:
        for cat in self.categories:
            if cat.id == category_id:
                return cat
        return None

    def first_of_type(self, canonical_type: str) -> Optional[CatalogCategory]:
        for cat in self.categories:
            if cat.canonical_type == canonical_type:
                return cat
        return None


def build_catalog(rows: Iterable[Category]) -> CategoryCatalog:
    return CategoryCatalog(
        categories=tuple(
            CatalogCategory(
                id=row.id,
                name=row.name,
                canonical_type=row.canonical_type,
                examples=tuple(row.examples or ()),
            )
            for row in rows
        )
    )


def load_catalog(db: Session) -> CategoryCatalog:
    rows = db.execute(
        select(Category).order_by(Category.sort_order.asc(), Category.name.asc())
    ).scalars().all()
    return build_catalog(rows)


def catalog_fingerprint(db: Session) -> Tuple[int, Any]:
    """(row count, newest updated_at) of the category table."""
    count, newest = db.execute(
        select(func.count(Category.id), func.max(Category.updated_at))
    ).one()
    return int(count or 0), newest


class CatalogCache:
    """
    Per-process catalog snapshot. Every get() compares the table fingerprint,
    so edits made through another worker or connection are picked up on the
    next resolution.
    """

    def __init__(self) -> None:
        self._snapshot: Optional[CategoryCatalog] = None
        self._fingerprint: Optional[Tuple[int, Any]] = None

    def get(self, db: Session) -> CategoryCatalog:
        fingerprint = catalog_fingerprint(db)
        snapshot = self._snapshot
        if snapshot is None or fingerprint != self._fingerprint:
            snapshot = load_catalog(db)
            self._snapshot = snapshot
            self._fingerprint = fingerprint
            logger.debug("Loaded category catalog (%s categories)", len(snapshot))
        return snapshot

    def invalidate(self) -> None:
        self._snapshot = None
        self._fingerprint = None


catalog_cache = CatalogCache()


def list_categories(db: Session) -> List[Dict[str, object]]:
    return [
        {
            "id": cat.id,
            "name": cat.name,
            "canonical_type": cat.canonical_type,
            "examples": list(cat.examples),
        }
        for cat in catalog_cache.get(db)
    ]


def upsert_category(
    db: Session,
    *,
    name: str,
    canonical_type: str,
    examples: Iterable[str],
    sort_order: Optional[int] = None,
) -> Category:
    """
    Administrative catalog edit. Creates the category or replaces its type and
    examples, then drops the cached snapshot so the next resolution sees it.
    """
    name = (name or "").strip()
    canonical_type = (canonical_type or "").strip().lower()
    if not name:
        raise ConflictViolation("category name is required")
    if canonical_type not in CANONICAL_TYPES:
        raise ConflictViolation(
            f"canonical_type must be one of {', '.join(CANONICAL_TYPES)}; got '{canonical_type}'"
        )
    cleaned = [e.strip() for e in examples if e and e.strip()]

    cat = db.execute(select(Category).where(Category.name == name)).scalar_one_or_none()
    if cat is None:
        if sort_order is None:
            current_max = db.execute(select(Category.sort_order).order_by(Category.sort_order.desc())).scalars().first()
            sort_order = (current_max + 1) if current_max is not None else 0
        cat = Category(name=name, canonical_type=canonical_type, examples=cleaned, sort_order=sort_order)
        db.add(cat)
    else:
        cat.canonical_type = canonical_type
        cat.examples = cleaned
        if sort_order is not None:
            cat.sort_order = sort_order
    db.commit()
    db.refresh(cat)

    catalog_cache.invalidate()
    logger.info("Catalog edit: category=%s type=%s examples=%s", name, canonical_type, len(cleaned))
    return cat
