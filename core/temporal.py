'''
    File Name: temporal.py
    Version: 1.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
    Description: Calendar-month keys and rolling month windows.
'''
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, List, Optional

from dateutil.relativedelta import relativedelta

import config


@dataclass(frozen=True, order=True)
class MonthKey:
    """A calendar month. `month` is 1-12, like `datetime.date.month`."""
    year: int
    month: int

    @classmethod
    def of(cls, value: date) -> "MonthKey":
        return cls(value.year, value.month)

    def label(self) -> str:
        """Short chart label, e.g. 'Mar/24'."""
        return f"{config.MONTH_LABELS[self.month - 1]}/{self.year % 100:02d}"


def coerce_date(value: Any) -> Optional[date]:
    """Return `value` as a date, or None when it cannot be read as one.

    Accepts date/datetime objects and ISO strings; anything after the first
    ten characters of a string (a time part) is ignored.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def six_month_window(reference_date: date, year_offset: int = 0, months: int = config.WINDOW_MONTHS) -> List[MonthKey]:
    """Consecutive months ending at the reference month, oldest first.

    With `year_offset=-1` every month of the window is moved one year back,
    which is the comparison window for year-over-year figures.
    """
    anchor = coerce_date(reference_date)
    if anchor is None:
        raise ValueError(f"Invalid reference date: {reference_date!r}")
    anchor = anchor.replace(day=1) + relativedelta(years=year_offset)
    window = []
    for back in range(months - 1, -1, -1):
        window.append(MonthKey.of(anchor - relativedelta(months=back)))
    return window
