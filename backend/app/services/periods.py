from __future__ import annotations

import calendar
from datetime import date
from typing import Iterator, Tuple


def first_of_month(d: date) -> date:
    return d.replace(day=1)


def add_months(d: date, months: int) -> date:
    """First day of the month `months` away from d's month."""
    index = d.year * 12 + (d.month - 1) + months
    year, month0 = divmod(index, 12)
    return date(year, month0 + 1, 1)


def month_bounds(d: date) -> Tuple[date, date]:
    last_day = calendar.monthrange(d.year, d.month)[1]
    return date(d.year, d.month, 1), date(d.year, d.month, last_day)


def iter_months(start: date, end: date) -> Iterator[date]:
    """First days of every month from start's month through end's month, inclusive."""
    cur = first_of_month(start)
    stop = first_of_month(end)
    while cur <= stop:
        yield cur
        cur = add_months(cur, 1)


def parse_month(s: str) -> date:
    # expects "YYYY-MM"
    year, month = s.strip().split("-")
    return date(int(year), int(month), 1)
