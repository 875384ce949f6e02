from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.models import Account, Category, Company
from backend.app.services.catalog import catalog_cache
from backend.app.services.category_resolver import resolve_account_category
from backend.app.services.errors import NotFound

logger = logging.getLogger(__name__)


def require_company(db: Session, company_id: str) -> Company:
    company = db.get(Company, company_id) if company_id else None
    if not company:
        raise NotFound(f"Company with id {company_id} does not exist")
    return company


def map_company_accounts(db: Session, company_id: str) -> List[Dict[str, Any]]:
    """
    Re-resolve every account of a company, overwriting existing mappings.

    mapping_method reports the state before this run: "already_mapped" when the
    account had a category, "auto_mapped" when it did not.
    """
    require_company(db, company_id)
    catalog = catalog_cache.get(db)

    accounts = db.execute(
        select(Account)
        .where(Account.company_id == company_id)
        .order_by(Account.name.asc(), Account.id.asc())
    ).scalars().all()

    logger.info("Mapping %s accounts for company %s", len(accounts), company_id)

    out: List[Dict[str, Any]] = []
    for acct in accounts:
        previously_mapped = acct.mapping_category_id is not None
        category_id = resolve_account_category(db, acct.id, catalog=catalog, commit=False)
        category = catalog.get(category_id)
        out.append(
            {
                "account_id": acct.id,
                "account_name": acct.name,
                "category_id": category_id,
                "category_name": category.name if category else None,
                "mapping_method": "already_mapped" if previously_mapped else "auto_mapped",
            }
        )

    db.commit()
    logger.info("Mapped %s of %s accounts for company %s", len(out), len(accounts), company_id)
    return out


def get_unmapped_accounts(db: Session, company_id: str) -> List[Dict[str, Any]]:
    require_company(db, company_id)
    rows = db.execute(
        select(Account)
        .where(
            Account.company_id == company_id,
            Account.mapping_category_id.is_(None),
        )
        .order_by(Account.name.asc(), Account.id.asc())
    ).scalars().all()
    return [
        {
            "account_id": a.id,
            "account_name": a.name,
            "account_type": a.type,
            "account_subtype": a.subtype,
        }
        for a in rows
    ]


def set_account_mapping(db: Session, account_id: str, category_id: str) -> bool:
    """Manual override: force an account onto a category."""
    category = db.get(Category, category_id) if category_id else None
    if not category:
        raise NotFound(f"Category with id {category_id} does not exist")

    account = db.get(Account, account_id) if account_id else None
    if not account:
        raise NotFound(f"Account with id {account_id} not found")

    before = account.mapping_category_id
    account.mapping_category_id = category.id
    db.commit()

    logger.info(
        "Manual mapping: account=%s category=%s (was %s)",
        account_id,
        category.name,
        before,
    )
    return True
