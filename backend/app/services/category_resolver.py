from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Literal, Optional

from sqlalchemy.orm import Session

from backend.app.models import Account
from backend.app.services.catalog import CatalogCategory, CategoryCatalog, catalog_cache
from backend.app.services.errors import ConflictViolation, NotFound

logger = logging.getLogger(__name__)

Method = Literal["exact", "fuzzy", "fallback"]

EXACT_SCORE = 100
EXAMPLE_IN_NAME_SCORE = 80
NAME_IN_EXAMPLE_SCORE = 70
MIN_FUZZY_SCORE = 50

# Source account type -> canonical_type. Keys are matched verbatim.
ACCOUNT_TYPE_FALLBACK: Dict[str, str] = {
    "Income": "revenue",
    "Other Income": "revenue",
    "Cost of Goods Sold": "cogs",
    "Expense": "opex",
    "Other Expense": "opex",
    "Bank": "asset",
    "Other Current Asset": "asset",
    "Fixed Asset": "asset",
    "Other Asset": "asset",
    "Accounts Receivable": "asset",
    "Accounts Payable": "liability",
    "Credit Card": "liability",
    "Other Current Liability": "liability",
    "Long Term Liability": "liability",
    "Equity": "equity",
}
DEFAULT_FALLBACK_TYPE = "opex"


@dataclass(frozen=True)
class Resolution:
    category: CatalogCategory
    score: int
    method: Method


def fallback_canonical_type(account_type: Optional[str]) -> str:
    return ACCOUNT_TYPE_FALLBACK.get(account_type or "", DEFAULT_FALLBACK_TYPE)


def _exact_match(name: str, catalog: CategoryCatalog) -> Optional[CatalogCategory]:
    for cat in catalog:
        for example in cat.examples:
            if name == example.lower():
                return cat
    return None


def _fuzzy_score(name: str, cat: CatalogCategory) -> int:
    score = 0
    for example in cat.examples:
        ex = example.lower()
        if ex in name:
            score = max(score, EXAMPLE_IN_NAME_SCORE)
        if name in ex:
            score = max(score, NAME_IN_EXAMPLE_SCORE)
    return score


def score_account(name: Optional[str], account_type: Optional[str], catalog: CategoryCatalog) -> Resolution:
    """
    Pick the canonical category for one account. Pure; no database access.

    1. exact (case-insensitive) name == example, first category in catalog order
    2. best substring score; ties keep the earlier category
    3. below MIN_FUZZY_SCORE, classify by the declared account type
    """
    needle = (name or "").lower()

    exact = _exact_match(needle, catalog)
    if exact is not None:
        return Resolution(category=exact, score=EXACT_SCORE, method="exact")

    best: Optional[CatalogCategory] = None
    best_score = 0
    for cat in catalog:
        score = _fuzzy_score(needle, cat)
        if score > best_score:
            best, best_score = cat, score

    if best is not None and best_score >= MIN_FUZZY_SCORE:
        return Resolution(category=best, score=best_score, method="fuzzy")

    canonical_type = fallback_canonical_type(account_type)
    fallback = catalog.first_of_type(canonical_type)
    if fallback is None:
        raise ConflictViolation(
            f"Invariant violation: catalog has no category with canonical_type '{canonical_type}'."
        )
    return Resolution(category=fallback, score=best_score, method="fallback")


def resolve_account_category(
    db: Session,
    account_id: str,
    *,
    catalog: Optional[CategoryCatalog] = None,
    commit: bool = True,
) -> str:
    account = db.get(Account, account_id)
    if not account:
        raise NotFound(f"Account with id {account_id} not found")

    if catalog is None:
        catalog = catalog_cache.get(db)

    resolution = score_account(account.name, account.type, catalog)
    account.mapping_category_id = resolution.category.id

    if commit:
        db.commit()
    else:
        db.flush()

    logger.debug(
        "[mapping] account=%s name=%r -> %s (%s, score=%s)",
        account_id,
        account.name,
        resolution.category.name,
        resolution.method,
        resolution.score,
    )
    return resolution.category.id
