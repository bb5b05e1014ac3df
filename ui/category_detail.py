'''
    File Name: category_detail.py
    Version: 1.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''
from typing import List, Optional

from PyQt6 import QtWidgets

from core.indicators import establishment_names, resolve_establishment_name
from database.repositories import Snapshot
from models.transaction import Transaction, parse_amount
from .dashboard_view import format_currency


class CategoryDetailDialog(QtWidgets.QDialog):
    """Read-only list of the month's expenses behind one dashboard category."""

    def __init__(self, parent=None, category_name: str = "", transactions: Optional[List[Transaction]] = None,
                 snapshot: Optional[Snapshot] = None):
        super().__init__(parent)
        self.category_name = category_name
        self.transactions = list(transactions or [])
        snapshot = snapshot or Snapshot()
        names = establishment_names(snapshot.establishments)

        self.setWindowTitle(f"{category_name} - this month")
        layout = QtWidgets.QVBoxLayout()

        self.table = QtWidgets.QTableWidget(len(self.transactions), 4)
        self.table.setHorizontalHeaderLabels(["Date", "Description", "Establishment", "Amount"])
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.setEditTriggers(QtWidgets.QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.verticalHeader().setVisible(False)

        total = 0.0
        for row, tx in enumerate(self.transactions):
            amount = parse_amount(tx.amount) or 0.0
            total += amount
            place = resolve_establishment_name(tx.establishment_id, names) if tx.establishment_id else "-"
            values = [str(tx.date), tx.description or "-", place, format_currency(amount)]
            for col, value in enumerate(values):
                self.table.setItem(row, col, QtWidgets.QTableWidgetItem(value))
        self.table.resizeColumnsToContents()
        layout.addWidget(self.table)

        self.total_label = QtWidgets.QLabel(f"{len(self.transactions)} expense(s), total {format_currency(total)}")
        layout.addWidget(self.total_label)

        close_btn = QtWidgets.QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        btn_layout = QtWidgets.QHBoxLayout()
        btn_layout.addStretch(1)
        btn_layout.addWidget(close_btn)
        layout.addLayout(btn_layout)

        self.setLayout(layout)
        self.resize(560, 360)
