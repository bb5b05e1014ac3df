'''
    File Name: indicators.py
    Version: 1.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
    Description: Financial indicators shown on the dashboard.

    Everything here is pure: callers pass full snapshots of the user's
    collections plus the reference date, and get an `Indicators` back.
    Nothing is read from a clock or from storage.
'''
import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import config
from core.ranking import group_count, group_sum, top_k
from core.temporal import MonthKey, coerce_date, six_month_window
from models.category import Category
from models.establishment import Establishment
from models.indicators import (
    TREND_DOWN,
    TREND_STABLE,
    TREND_UP,
    BiggestExpense,
    CategoryTotal,
    EstablishmentFrequency,
    Indicators,
    MonthSummary,
)
from models.transaction import EXPENSE, INCOME, Transaction, parse_amount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    """A transaction whose amount, date and type could be interpreted."""
    tx: Transaction
    amount: float
    day: date
    month: MonthKey


def category_names(categories: Iterable[Category]) -> Dict[str, str]:
    return {c.id: c.description for c in categories}


def establishment_names(establishments: Iterable[Establishment]) -> Dict[str, str]:
    return {e.id: e.name for e in establishments}


def resolve_category_name(category_id: Optional[str], names: Mapping[str, str], default: str = config.OTHER_CATEGORY_LABEL) -> str:
    """Display name for a category reference.

    This is the one place where category ids become names: a missing id,
    an id with no matching category, or a category without a description
    all resolve to `default` ("Outros" unless a caller asks otherwise).
    """
    if not category_id:
        return default
    return names.get(category_id) or default


def resolve_establishment_name(establishment_id: Optional[str], names: Mapping[str, str], default: str = config.UNKNOWN_ESTABLISHMENT_LABEL) -> str:
    if not establishment_id:
        return default
    return names.get(establishment_id) or default


def _usable_entries(transactions: Iterable[Transaction]) -> Tuple[List[_Entry], List[str]]:
    entries: List[_Entry] = []
    skipped: List[str] = []
    for tx in transactions:
        amount = parse_amount(tx.amount)
        day = coerce_date(tx.date)
        if amount is None or day is None or tx.type not in (INCOME, EXPENSE):
            logger.warning(
                "Skipping transaction %s (type=%r, amount=%r, date=%r)",
                tx.id, tx.type, tx.amount, tx.date,
            )
            skipped.append(tx.id)
            continue
        entries.append(_Entry(tx, amount, day, MonthKey.of(day)))
    return entries, skipped


def _monthly_totals(entries: Sequence[_Entry]) -> Tuple[Dict[MonthKey, float], Dict[MonthKey, float]]:
    income: Dict[MonthKey, float] = {}
    expenses: Dict[MonthKey, float] = {}
    for entry in entries:
        bucket = income if entry.tx.type == INCOME else expenses
        bucket[entry.month] = bucket.get(entry.month, 0.0) + entry.amount
    return income, expenses


def classify_trend(latest: float, previous: float) -> str:
    """'up' above +10%, 'down' below -10%, otherwise 'stable' (strict bounds)."""
    if latest > previous * config.TREND_UP_FACTOR:
        return TREND_UP
    if latest < previous * config.TREND_DOWN_FACTOR:
        return TREND_DOWN
    return TREND_STABLE


def _reference_day(value: Any) -> date:
    day = coerce_date(value)
    if day is None:
        raise ValueError(f"Invalid reference date: {value!r}")
    return day


def percent_change(current: float, prior: float) -> Optional[float]:
    if prior > 0:
        return (current - prior) / prior * 100
    if current > 0:
        return math.inf
    return None


def compute_indicators(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
    establishments: Sequence[Establishment],
    reference_date: date,
) -> Indicators:
    """Compute every dashboard indicator for the month of `reference_date`."""
    today = _reference_day(reference_date)
    this_month = MonthKey.of(today)
    entries, skipped = _usable_entries(transactions)
    cat_names = category_names(categories)
    est_names = establishment_names(establishments)

    current = [e for e in entries if e.month == this_month]
    current_expenses = [e for e in current if e.tx.type == EXPENSE]
    income_total = sum((e.amount for e in current if e.tx.type == INCOME), 0.0)
    expense_total = sum((e.amount for e in current_expenses), 0.0)

    by_category = group_sum(
        current_expenses,
        lambda e: resolve_category_name(e.tx.category_id, cat_names),
        lambda e: e.amount,
    )

    biggest: Optional[_Entry] = None
    for entry in current_expenses:
        if biggest is None or entry.amount > biggest.amount:
            biggest = entry

    frequent = top_k(
        group_count(current_expenses, lambda e: e.tx.establishment_id),
        config.TOP_ESTABLISHMENTS,
    )

    income_by_month, expenses_by_month = _monthly_totals(entries)
    comparison = []
    for key in six_month_window(today):
        month_income = income_by_month.get(key, 0.0)
        month_expenses = expenses_by_month.get(key, 0.0)
        comparison.append(MonthSummary(
            year=key.year,
            month=key.month,
            income=month_income,
            expenses=month_expenses,
            balance=month_income - month_expenses,
        ))

    current_window_total = sum((m.expenses for m in comparison), 0.0)
    prior_window = six_month_window(today, year_offset=-1)
    prior_window_total = sum((expenses_by_month.get(key, 0.0) for key in prior_window), 0.0)

    trend = TREND_STABLE
    if len(comparison) >= 2:
        trend = classify_trend(comparison[-1].expenses, comparison[-2].expenses)

    return Indicators(
        current_month_balance=income_total - expense_total,
        current_month_income=income_total,
        current_month_expenses=expense_total,
        expenses_by_category=tuple(CategoryTotal(g.key, g.total) for g in by_category),
        biggest_expense=_biggest_expense(biggest, cat_names),
        monthly_trend=trend,
        frequent_establishments=tuple(
            EstablishmentFrequency(g.key, resolve_establishment_name(g.key, est_names), g.count)
            for g in frequent
        ),
        monthly_comparison=tuple(comparison),
        year_over_year_expense_change=percent_change(current_window_total, prior_window_total),
        skipped_transaction_ids=tuple(skipped),
    )


def _biggest_expense(entry: Optional[_Entry], cat_names: Mapping[str, str]) -> Optional[BiggestExpense]:
    if entry is None:
        return None
    return BiggestExpense(
        transaction_id=entry.tx.id,
        amount=entry.amount,
        description=entry.tx.description,
        category_id=entry.tx.category_id,
        category_name=resolve_category_name(entry.tx.category_id, cat_names),
        date=entry.day.isoformat(),
        establishment_id=entry.tx.establishment_id,
    )


def category_transactions(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    category_name: str,
    reference_date: date,
) -> List[Transaction]:
    """Current-month expenses shown under `category_name`, newest first.

    Selection uses the same name policy as `expenses_by_category`, so the
    "Outros" slice lists every expense without a resolvable category.
    """
    this_month = MonthKey.of(_reference_day(reference_date))
    names = category_names(categories)
    entries, _ = _usable_entries(transactions)
    matching = [
        e for e in entries
        if e.tx.type == EXPENSE
        and e.month == this_month
        and resolve_category_name(e.tx.category_id, names) == category_name
    ]
    matching.sort(key=lambda e: e.day, reverse=True)
    return [e.tx for e in matching]
