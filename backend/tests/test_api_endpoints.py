from datetime import date
from decimal import Decimal

import pytest

from backend.app.models import Account, Company, Transaction


@pytest.fixture()
def company(seeded_db):
    company = Company(name="Acme")
    seeded_db.add(company)
    seeded_db.flush()
    sales = Account(company_id=company.id, external_account_id="1", name="Sales", type="Income")
    seeded_db.add(sales)
    seeded_db.flush()
    seeded_db.add(
        Transaction(
            company_id=company.id,
            external_txn_id="t1",
            txn_type="Invoice",
            txn_date=date(2024, 1, 10),
            amount=Decimal("125.50"),
            account_id=sales.id,
            source_run_id="ingest-1",
        )
    )
    seeded_db.commit()
    return company


def test_list_categories(api_client):
    resp = api_client.get("/api/categories")

    assert resp.status_code == 200
    body = resp.json()
    assert [c["name"] for c in body][0] == "Revenue"
    assert "Sales" in body[0]["examples"]


def test_catalog_edits_disabled_by_default(api_client, monkeypatch):
    monkeypatch.delenv("ALLOW_CATALOG_EDITS", raising=False)

    resp = api_client.put("/api/categories", json={"name": "Suspense", "canonical_type": "liability"})

    assert resp.status_code == 403


def test_catalog_edit_when_enabled(api_client, monkeypatch):
    monkeypatch.setenv("ALLOW_CATALOG_EDITS", "1")

    ok = api_client.put(
        "/api/categories",
        json={"name": "Suspense", "canonical_type": "liability", "examples": ["Clearing"]},
    )
    bad = api_client.put("/api/categories", json={"name": "Other", "canonical_type": "misc"})

    assert ok.status_code == 200
    assert ok.json()["examples"] == ["Clearing"]
    assert bad.status_code == 409


def test_map_and_list_unmapped(api_client, company):
    before = api_client.get(f"/api/companies/{company.id}/accounts/unmapped")
    assert [a["account_name"] for a in before.json()] == ["Sales"]

    mapped = api_client.post(f"/api/companies/{company.id}/accounts/map")
    assert mapped.status_code == 200
    assert mapped.json()[0]["category_name"] == "Revenue"
    assert mapped.json()[0]["mapping_method"] == "auto_mapped"

    after = api_client.get(f"/api/companies/{company.id}/accounts/unmapped")
    assert after.json() == []


def test_resolve_unknown_account_is_404(api_client):
    resp = api_client.post("/api/accounts/missing/resolve")

    assert resp.status_code == 404
    assert "missing" in resp.json()["detail"]


def test_manual_mapping(api_client, company, seeded_db):
    categories = api_client.get("/api/categories").json()
    equity = next(c for c in categories if c["name"] == "Equity")
    account_id = seeded_db.query(Account.id).filter(Account.company_id == company.id).scalar()

    resp = api_client.put(f"/api/accounts/{account_id}/mapping", json={"category_id": equity["id"]})
    missing = api_client.put(f"/api/accounts/{account_id}/mapping", json={"category_id": "nope"})

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert missing.status_code == 404


def test_aggregate_pl_endpoint(api_client, company):
    api_client.post(f"/api/companies/{company.id}/accounts/map")
    payload = {"period_start": "2024-01-01", "period_end": "2024-01-31", "run_id": "run-1"}

    first = api_client.post(f"/api/companies/{company.id}/aggregates/pl", json=payload)
    second = api_client.post(f"/api/companies/{company.id}/aggregates/pl", json=payload)

    assert first.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["row_version"] == 2

    pl = api_client.get(f"/api/companies/{company.id}/statements/pl").json()
    assert pl[0]["revenue"] == 125.5
    assert pl[0]["row_version"] == 2


@pytest.mark.parametrize(
    "payload",
    [
        {"period_start": "2024-02-01", "period_end": "2024-01-01", "run_id": "run-1"},
        {"period_start": "2024-01-01", "period_end": "2024-01-31"},
        {"period_end": "2024-01-31", "run_id": "run-1"},
    ],
)
def test_aggregate_invalid_request_is_400(api_client, company, payload):
    resp = api_client.post(f"/api/companies/{company.id}/aggregates/cash-flow", json=payload)

    assert resp.status_code == 400


def test_aggregate_unknown_company_is_404(api_client):
    payload = {"period_start": "2024-01-01", "period_end": "2024-01-31", "run_id": "run-1"}

    resp = api_client.post("/api/companies/missing/aggregates/pl", json=payload)

    assert resp.status_code == 404


def test_month_close_and_kpis(api_client, company):
    api_client.post(f"/api/companies/{company.id}/accounts/map")

    resp = api_client.post(
        f"/api/companies/{company.id}/aggregates/month",
        json={"month": "2024-01-15", "run_id": "close-1"},
    )
    assert resp.status_code == 200
    assert resp.json()["period_end"] == "2024-01-31"

    kpis = api_client.get(
        f"/api/companies/{company.id}/statements/kpis",
        params={"start_date": "2024-01-01", "end_date": "2024-12-31"},
    ).json()
    assert kpis[0]["net_margin_pct"] == 100.0
    assert kpis[0]["operating_cash_flow"] == 125.5


def test_projection_without_history(api_client, company):
    resp = api_client.post(f"/api/companies/{company.id}/projections")
    latest = api_client.get(f"/api/companies/{company.id}/projections/latest")

    assert resp.json()["rows_written"] == 0
    assert latest.json()["months"] == []


def test_config_endpoint(api_client, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")

    body = api_client.get("/api/config").json()

    assert body["log_level"] == "DEBUG"
    assert body["allow_catalog_edits"] in (True, False)
