'''
    File Name: dashboard_view.py
    Version: 2.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''
import logging
import math
from typing import Optional

from PyQt6.QtWidgets import QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QLabel, QSizePolicy, QComboBox
from PyQt6.QtCore import pyqtSignal

from matplotlib.figure import Figure
from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas

import pandas as pd

import config
from core.temporal import MonthKey
from models.indicators import TREND_DOWN, TREND_UP, Indicators

logger = logging.getLogger(__name__)

PIE_COLORS = [
    "#FF6384", "#36A2EB", "#FFCE56", "#4BC0C0", "#9966FF",
    "#FF9F40", "#4CAF50", "#E91E63", "#673AB7", "#00BCD4",
]
INCOME_COLOR = "#2ecc71"
EXPENSE_COLOR = "#e74c3c"


def format_currency(value: float) -> str:
    """Format as 'R$ 1.234,56'."""
    text = f"{value:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{config.DEFAULT_CURRENCY} {text}"


def format_trend(trend: str) -> str:
    if trend == TREND_UP:
        return "Expenses rising"
    if trend == TREND_DOWN:
        return "Expenses falling"
    return "Expenses stable"


def format_change(change: Optional[float]) -> str:
    if change is None:
        return "No data"
    if math.isinf(change):
        return "New expenses (no spending a year ago)"
    return f"{change:+.1f}% vs last year"


def comparison_frame(indicators: Indicators) -> "pd.DataFrame":
    """Six-month history as a DataFrame indexed by month label."""
    rows = [
        {
            "month": MonthKey(m.year, m.month).label(),
            "income": m.income,
            "expenses": m.expenses,
            "balance": m.balance,
        }
        for m in indicators.monthly_comparison
    ]
    return pd.DataFrame(rows, columns=["month", "income", "expenses", "balance"]).set_index("month")


class DashboardView(QWidget):
    """Summary cards and charts for one computed `Indicators` value.

    The view never computes anything itself: the owner calls
    `set_indicators()` after every (re)load. Clicking a pie slice emits
    `category_selected` with the category name.
    """

    category_selected = pyqtSignal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._indicators: Optional[Indicators] = None
        self._current_chart_type = "category"
        self._wedge_categories = {}

        self._figure = Figure(figsize=(8, 4), dpi=100)
        self._canvas = FigureCanvas(self._figure)
        self._canvas.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self._ax = self._figure.add_subplot(111)
        self._canvas.mpl_connect("pick_event", self._on_pick)

        self.setup_ui()
        self.plot_data()

    def setup_ui(self) -> None:
        main_layout = QVBoxLayout()

        cards = QGridLayout()
        self._balance_label = QLabel()
        self._income_label = QLabel()
        self._expenses_label = QLabel()
        self._biggest_label = QLabel()
        self._trend_label = QLabel()
        self._yoy_label = QLabel()
        self._establishments_label = QLabel()
        self._skipped_label = QLabel()
        self._skipped_label.setStyleSheet("color: #b35900;")

        cards.addWidget(QLabel("Balance (month):"), 0, 0)
        cards.addWidget(self._balance_label, 0, 1)
        cards.addWidget(QLabel("Income:"), 0, 2)
        cards.addWidget(self._income_label, 0, 3)
        cards.addWidget(QLabel("Expenses:"), 0, 4)
        cards.addWidget(self._expenses_label, 0, 5)
        cards.addWidget(QLabel("Biggest expense:"), 1, 0)
        cards.addWidget(self._biggest_label, 1, 1, 1, 5)
        cards.addWidget(QLabel("Trend:"), 2, 0)
        cards.addWidget(self._trend_label, 2, 1)
        cards.addWidget(QLabel("6 months vs last year:"), 2, 2)
        cards.addWidget(self._yoy_label, 2, 3, 1, 3)
        cards.addWidget(QLabel("Frequent places:"), 3, 0)
        cards.addWidget(self._establishments_label, 3, 1, 1, 5)
        main_layout.addLayout(cards)
        main_layout.addWidget(self._skipped_label)

        controls_layout = QHBoxLayout()
        chart_label = QLabel("Chart Type:")
        self._chart_combo = QComboBox()
        self._chart_combo.addItems(["By Category", "Monthly History"])
        self._chart_combo.currentTextChanged.connect(self._on_chart_type_changed)
        controls_layout.addWidget(chart_label)
        controls_layout.addWidget(self._chart_combo)
        controls_layout.addStretch()
        main_layout.addLayout(controls_layout)

        main_layout.addWidget(self._canvas)
        self.setLayout(main_layout)
        self._update_cards()

    def _on_chart_type_changed(self, chart_type: str) -> None:
        type_map = {"By Category": "category", "Monthly History": "month"}
        self._current_chart_type = type_map.get(chart_type, "category")
        self.plot_data()

    def set_indicators(self, indicators: Optional[Indicators]) -> None:
        self._indicators = indicators
        self._update_cards()
        self.plot_data()

    def _update_cards(self) -> None:
        ind = self._indicators
        if ind is None:
            for label in (self._balance_label, self._income_label, self._expenses_label):
                label.setText(format_currency(0.0))
            self._biggest_label.setText("No expenses this month")
            self._trend_label.setText(format_trend("stable"))
            self._yoy_label.setText(format_change(None))
            self._establishments_label.setText("-")
            self._skipped_label.setText("")
            return

        self._balance_label.setText(format_currency(ind.current_month_balance))
        self._income_label.setText(format_currency(ind.current_month_income))
        self._expenses_label.setText(format_currency(ind.current_month_expenses))
        biggest = ind.biggest_expense
        if biggest is None:
            self._biggest_label.setText("No expenses this month")
        else:
            desc = biggest.description or biggest.category_name
            self._biggest_label.setText(f"{format_currency(biggest.amount)} - {desc} ({biggest.date})")
        self._trend_label.setText(format_trend(ind.monthly_trend))
        self._yoy_label.setText(format_change(ind.year_over_year_expense_change))
        if ind.frequent_establishments:
            self._establishments_label.setText(
                ", ".join(f"{e.name} ({e.count}x)" for e in ind.frequent_establishments)
            )
        else:
            self._establishments_label.setText("-")
        if ind.skipped_transaction_ids:
            self._skipped_label.setText(
                f"{len(ind.skipped_transaction_ids)} transaction(s) ignored: invalid amount, date or type"
            )
        else:
            self._skipped_label.setText("")

    def plot_data(self) -> None:
        """Plot based on current chart type and the latest indicators."""
        self._ax.clear()
        self._wedge_categories = {}
        try:
            if self._current_chart_type == "category":
                self._plot_by_category(self._ax)
            else:
                self._plot_by_month(self._ax)
            self._canvas.draw()
        except Exception:
            logger.exception("Failed to plot data for chart type: %s", self._current_chart_type)
            self._ax.clear()
            self._ax.text(0.5, 0.5, "Error rendering chart", ha="center", va="center")
            self._canvas.draw()

    def _empty_state(self, ax, message: str) -> None:
        ax.text(0.5, 0.5, message, ha="center", va="center", fontsize=12, color="#666666")
        ax.set_xticks([])
        ax.set_yticks([])

    def _plot_by_category(self, ax) -> None:
        """Pie chart of the top categories of the month."""
        if self._indicators is None or not self._indicators.expenses_by_category:
            self._empty_state(ax, "No expenses this month")
            return
        top = self._indicators.expenses_by_category[:config.TOP_CATEGORIES_CHART]
        wedges, *_ = ax.pie(
            [c.amount for c in top],
            labels=[c.name for c in top],
            colors=[PIE_COLORS[i % len(PIE_COLORS)] for i in range(len(top))],
            autopct="%1.0f%%",
            startangle=90,
        )
        for wedge, category in zip(wedges, top):
            wedge.set_picker(True)
            self._wedge_categories[wedge] = category.name
        ax.set_title(f"Top {len(top)} expenses (month) - click a slice for details")
        ax.axis("equal")

    def _on_pick(self, event) -> None:
        name = self._wedge_categories.get(event.artist)
        if name is None:
            return
        logger.debug("Category slice picked: %s", name)
        self.category_selected.emit(name)

    def _plot_by_month(self, ax) -> None:
        """Grouped income/expense bars for the last six months."""
        if self._indicators is None:
            self._empty_state(ax, "No data loaded")
            return
        df = comparison_frame(self._indicators)
        df[["income", "expenses"]].plot.bar(ax=ax, color=[INCOME_COLOR, EXPENSE_COLOR], rot=30)
        ax.set_ylabel(f"Amount ({config.DEFAULT_CURRENCY})")
        ax.set_xlabel("")
        ax.set_title("Monthly history (last 6 months)")
        ax.legend(["Income", "Expenses"])
        ax.grid(axis="y", alpha=0.3)
