from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from backend.app.models import Company, MonthlyPL, Projection
from backend.app.services.errors import NotFound
from backend.app.services.periods import add_months, month_bounds
from backend.app.services.projection_service import (
    TrailingHistory,
    annual_growth_rate,
    build_projection_rows,
    generate_projection,
    project_value,
    trailing_history,
)


AS_OF = date(2024, 7, 15)


def _company(db):
    company = Company(name="Acme")
    db.add(company)
    db.commit()
    return company


def _pl(db, company, month_start, revenue, cogs, opex):
    start, end = month_bounds(month_start)
    db.add(
        MonthlyPL(
            company_id=company.id,
            period_start=start,
            period_end=end,
            totals={"revenue": revenue, "cogs": cogs, "opex": opex},
            source_run_id="run-1",
        )
    )


def _six_months(db, company):
    for offset in range(1, 7):
        _pl(db, company, add_months(AS_OF, -offset), 1000.0, 200.0, 400.0)
    db.commit()


def test_compounding_matches_fixed_growth_rate():
    assert project_value(Decimal("1000"), 3) == Decimal("1061.21")
    assert project_value(Decimal("600"), 3) == Decimal("636.72")
    assert project_value(Decimal("1000"), 1) == Decimal("1020.00")
    assert annual_growth_rate() == Decimal("1.2682")


def test_build_projection_rows_is_gapless_and_starts_next_month():
    history = TrailingHistory(avg_revenue=Decimal("1000"), avg_costs=Decimal("600"), months_used=6)
    rows = build_projection_rows(history, as_of=AS_OF, generated_at=datetime(2024, 7, 15, tzinfo=timezone.utc))

    months = [r["month"] for r in rows]
    assert len(rows) == 12
    assert months[0] == date(2024, 8, 1)
    assert months[-1] == date(2025, 7, 1)
    assert months == [add_months(AS_OF, i) for i in range(1, 13)]
    assert [r["assumptions"]["projection_month_offset"] for r in rows] == list(range(1, 13))
    assert rows[0]["assumptions"]["method"] == "moving_average_6m"
    assert rows[0]["assumptions"]["confidence"] == "full"


def test_zero_history_writes_nothing(db_session):
    company = _company(db_session)

    assert generate_projection(db_session, company.id, as_of=AS_OF) == 0
    assert db_session.execute(select(func.count()).select_from(Projection)).scalar_one() == 0


def test_generate_projection_writes_twelve_rows(db_session):
    company = _company(db_session)
    _six_months(db_session, company)

    assert generate_projection(db_session, company.id, as_of=AS_OF) == 12

    rows = db_session.execute(
        select(Projection).where(Projection.company_id == company.id).order_by(Projection.month)
    ).scalars().all()
    assert len(rows) == 12
    assert {r.snapshot_date for r in rows} == {AS_OF}
    assert rows[2].month == date(2024, 10, 1)
    assert rows[2].revenue_projection == Decimal("1061.21")
    assert rows[2].cost_projection == Decimal("636.72")
    assert rows[0].assumptions["historical_months_used"] == 6
    assert rows[0].assumptions["base_revenue_avg"] == 1000.0
    assert rows[0].assumptions["base_costs_avg"] == 600.0


def test_window_excludes_current_and_older_months(db_session):
    company = _company(db_session)
    _six_months(db_session, company)
    # current month and seven months back are both outside the window
    _pl(db_session, company, date(2024, 7, 1), 99999.0, 0.0, 0.0)
    _pl(db_session, company, date(2023, 12, 1), 99999.0, 0.0, 0.0)
    db_session.commit()

    history = trailing_history(db_session, company.id, AS_OF)

    assert history.months_used == 6
    assert history.avg_revenue == Decimal("1000")
    assert history.avg_costs == Decimal("600")


def test_partial_history_is_flagged(db_session):
    company = _company(db_session)
    _pl(db_session, company, date(2024, 6, 1), 900.0, 100.0, 200.0)
    _pl(db_session, company, date(2024, 5, 1), 1100.0, 100.0, 200.0)
    db_session.commit()

    assert generate_projection(db_session, company.id, as_of=AS_OF) == 12

    row = db_session.execute(select(Projection).order_by(Projection.month)).scalars().first()
    assert row.assumptions["confidence"] == "partial"
    assert row.assumptions["historical_months_used"] == 2
    assert row.revenue_projection == Decimal("1020.00")
    assert row.cost_projection == Decimal("306.00")


def test_rerun_same_day_updates_in_place(db_session):
    company = _company(db_session)
    _six_months(db_session, company)
    generate_projection(db_session, company.id, as_of=AS_OF)

    db_session.execute(MonthlyPL.__table__.update().values(totals={"revenue": 2000.0, "cogs": 0.0, "opex": 0.0}))
    db_session.commit()
    generate_projection(db_session, company.id, as_of=AS_OF)

    db_session.expire_all()
    rows = db_session.execute(select(Projection).order_by(Projection.month)).scalars().all()
    assert len(rows) == 12
    assert rows[0].revenue_projection == Decimal("2040.00")


def test_new_snapshot_date_keeps_previous_snapshot(db_session):
    company = _company(db_session)
    _six_months(db_session, company)

    generate_projection(db_session, company.id, as_of=AS_OF)
    generate_projection(db_session, company.id, as_of=date(2024, 7, 16))

    assert db_session.execute(select(func.count()).select_from(Projection)).scalar_one() == 24


@pytest.mark.parametrize("company_id", ["", None, "missing-company"])
def test_generate_projection_unknown_company_is_not_found(db_session, company_id):
    with pytest.raises(NotFound):
        generate_projection(db_session, company_id, as_of=AS_OF)
