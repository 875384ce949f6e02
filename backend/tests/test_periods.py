from datetime import date

from backend.app.services.periods import add_months, iter_months, month_bounds, parse_month


def test_add_months_crosses_year_boundaries():
    assert add_months(date(2024, 11, 17), 3) == date(2025, 2, 1)
    assert add_months(date(2024, 1, 31), -6) == date(2023, 7, 1)


def test_month_bounds_handles_leap_february():
    assert month_bounds(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(date(2023, 2, 10)) == (date(2023, 2, 1), date(2023, 2, 28))


def test_iter_months_is_inclusive():
    months = list(iter_months(date(2023, 11, 5), date(2024, 2, 1)))
    assert months == [date(2023, 11, 1), date(2023, 12, 1), date(2024, 1, 1), date(2024, 2, 1)]


def test_parse_month():
    assert parse_month(" 2024-03 ") == date(2024, 3, 1)
