'''
    File Name: indicators.py
    Version: 1.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
    Description: Result records produced by the indicator engine (never persisted).
'''
from dataclasses import dataclass, field
from typing import Optional, Tuple

TREND_UP = "up"
TREND_DOWN = "down"
TREND_STABLE = "stable"


@dataclass(frozen=True)
class CategoryTotal:
    name: str
    amount: float


@dataclass(frozen=True)
class EstablishmentFrequency:
    id: str
    name: str
    count: int


@dataclass(frozen=True)
class MonthSummary:
    """Income/expense totals for one calendar month (month is 1-12)."""
    year: int
    month: int
    income: float
    expenses: float
    balance: float


@dataclass(frozen=True)
class BiggestExpense:
    transaction_id: str
    amount: float
    description: str
    category_id: Optional[str]
    category_name: str
    date: str
    establishment_id: Optional[str]


@dataclass(frozen=True)
class Indicators:
    """
    Dashboard figures derived from one snapshot of the user's data.

    `year_over_year_expense_change` is a percentage, `math.inf` when the
    prior-year window had no expenses but the current one has, and `None`
    when neither window has expenses.

    `monthly_comparison` holds six entries, oldest first, ending at the
    reference month. Their `month` is the calendar month 1-12 (January is 1,
    as in `datetime.date.month`), not a 0-based index.
    """
    current_month_balance: float
    current_month_income: float
    current_month_expenses: float
    expenses_by_category: Tuple[CategoryTotal, ...]
    biggest_expense: Optional[BiggestExpense]
    monthly_trend: str
    frequent_establishments: Tuple[EstablishmentFrequency, ...]
    monthly_comparison: Tuple[MonthSummary, ...]
    year_over_year_expense_change: Optional[float]
    skipped_transaction_ids: Tuple[str, ...] = field(default=())
