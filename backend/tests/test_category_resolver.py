import pytest

from backend.app.coa_templates import CANONICAL_CATEGORIES
from backend.app.services.catalog import CatalogCategory, CategoryCatalog
from backend.app.services.category_resolver import (
    ACCOUNT_TYPE_FALLBACK,
    fallback_canonical_type,
    score_account,
)
from backend.app.services.errors import ConflictViolation


def _catalog(templates=CANONICAL_CATEGORIES) -> CategoryCatalog:
    return CategoryCatalog(
        categories=tuple(
            CatalogCategory(
                id=f"cat-{i}",
                name=template["name"],
                canonical_type=template["canonical_type"],
                examples=tuple(template["examples"]),
            )
            for i, template in enumerate(templates)
        )
    )


def test_exact_match_is_case_insensitive():
    res = score_account("SALES", "Income", _catalog())

    assert res.category.name == "Revenue"
    assert res.method == "exact"
    assert res.score == 100


def test_exact_match_beats_higher_ranked_substring():
    # "Bank" (Assets) is a substring, but "Bank Charges" is an exact opex example.
    res = score_account("Bank Charges", "Expense", _catalog())

    assert res.category.name == "Operating Expenses"
    assert res.method == "exact"


def test_example_contained_in_name_scores_80():
    res = score_account("Monthly Rent Payment", "Expense", _catalog())

    assert res.category.name == "Operating Expenses"
    assert res.method == "fuzzy"
    assert res.score == 80


def test_name_contained_in_example_scores_70():
    res = score_account("Retained", "Equity", _catalog())

    assert res.category.name == "Equity"
    assert res.method == "fuzzy"
    assert res.score == 70


def test_fuzzy_tie_keeps_earlier_catalog_category():
    # "cash" (Assets) and "sales" (Revenue) both score 80.
    res = score_account("Cash Sales", "Bank", _catalog())

    assert res.category.name == "Revenue"
    assert res.score == 80


def test_fuzzy_score_ignores_declared_type():
    res = score_account("Monthly Rent Payment", "Income", _catalog())

    assert res.category.canonical_type == "opex"


def test_fallback_uses_declared_account_type():
    res = score_account("Zzz Widget", "Credit Card", _catalog())

    assert res.method == "fallback"
    assert res.category.name == "Liabilities"


def test_fallback_unknown_type_defaults_to_opex():
    assert score_account("Zzz Widget", "Mystery", _catalog()).category.name == "Operating Expenses"
    assert score_account("Zzz Widget", None, _catalog()).category.name == "Operating Expenses"


def test_fallback_type_match_is_verbatim():
    assert fallback_canonical_type("Bank") == "asset"
    assert fallback_canonical_type("bank") == "opex"


def test_fallback_table_is_covered_by_seeded_catalog():
    catalog = _catalog()
    for account_type, canonical_type in ACCOUNT_TYPE_FALLBACK.items():
        assert catalog.first_of_type(canonical_type) is not None, account_type


def test_fallback_missing_from_catalog_raises():
    catalog = _catalog([CANONICAL_CATEGORIES[0]])

    with pytest.raises(ConflictViolation):
        score_account("Zzz Widget", "Equity", catalog)


def test_empty_name_matches_first_category_by_substring():
    res = score_account("", "Equity", _catalog())

    assert res.category.name == "Revenue"
    assert res.score == 70


def test_resolution_is_deterministic():
    catalog = _catalog()
    names = ["Checking", "Owner Draws", "Consulting", "Freight", "Zzz"]

    first = [score_account(n, "Expense", catalog).category.id for n in names]
    second = [score_account(n, "Expense", catalog).category.id for n in names]

    assert first == second
