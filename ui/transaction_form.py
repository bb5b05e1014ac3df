'''
    File Name: transaction_form.py
    Version: 2.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''
from dataclasses import replace
from typing import Optional

from PyQt6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QFormLayout,
    QLineEdit,
    QDoubleSpinBox,
    QDateEdit,
    QComboBox,
    QPushButton,
    QHBoxLayout,
    QMessageBox,
)
from PyQt6.QtCore import QDate

from core.temporal import coerce_date
from database.repositories import Snapshot
from models.transaction import (
    EXPENSE,
    FIXED,
    INCOME,
    VARIABLE,
    Transaction,
    new_transaction_id,
    now_iso,
    parse_amount,
)


class TransactionForm(QDialog):
    """Dialog to create or edit a transaction.

    Usage:
        dlg = TransactionForm(parent, snapshot=snapshot)
        if dlg.exec():
            tx = dlg.get_transaction()

    The snapshot only feeds the category/group/subgroup/establishment
    pickers; persisting the result is the caller's job.
    """

    def __init__(self, parent=None, snapshot: Optional[Snapshot] = None, transaction: Optional[Transaction] = None):
        super().__init__(parent)
        self.snapshot = snapshot or Snapshot()
        self._original = transaction
        self._transaction: Optional[Transaction] = None

        self.setWindowTitle("Edit Transaction" if transaction else "New Transaction")
        self.setup_ui()

        if transaction:
            self._load_transaction(transaction)

    def setup_ui(self) -> None:
        layout = QVBoxLayout()

        form = QFormLayout()

        self.type = QComboBox()
        self.type.addItem("Income", INCOME)
        self.type.addItem("Expense", EXPENSE)
        form.addRow("Type:", self.type)

        self.frequency = QComboBox()
        self.frequency.addItem("Variable", VARIABLE)
        self.frequency.addItem("Fixed", FIXED)
        form.addRow("Frequency:", self.frequency)

        self.amount = QDoubleSpinBox()
        self.amount.setMinimum(0)
        self.amount.setMaximum(1_000_000_000)
        self.amount.setDecimals(2)
        form.addRow("Amount:", self.amount)

        self.date = QDateEdit()
        self.date.setCalendarPopup(True)
        self.date.setDisplayFormat("yyyy-MM-dd")
        self.date.setDate(QDate.currentDate())
        form.addRow("Date:", self.date)

        self.category = QComboBox()
        self.group = QComboBox()
        self.subgroup = QComboBox()
        self.establishment = QComboBox()
        form.addRow("Category:", self.category)
        form.addRow("Group:", self.group)
        form.addRow("Subgroup:", self.subgroup)
        form.addRow("Establishment:", self.establishment)

        self.description = QLineEdit()
        form.addRow("Description:", self.description)

        layout.addLayout(form)

        # Buttons
        btn_layout = QHBoxLayout()
        self.save_btn = QPushButton("Save")
        self.cancel_btn = QPushButton("Cancel")
        btn_layout.addStretch(1)
        btn_layout.addWidget(self.save_btn)
        btn_layout.addWidget(self.cancel_btn)

        layout.addLayout(btn_layout)

        self.setLayout(layout)

        # Connections
        self.save_btn.clicked.connect(self.save_transaction)
        self.cancel_btn.clicked.connect(self.reject)
        self.category.currentIndexChanged.connect(self._refresh_groups)
        self.group.currentIndexChanged.connect(self._refresh_subgroups)

        self._load_choices()

    def _load_choices(self) -> None:
        self.category.clear()
        self.category.addItem("", None)
        for c in self.snapshot.categories:
            self.category.addItem(c.description, c.id)

        self.establishment.clear()
        self.establishment.addItem("", None)
        for e in self.snapshot.establishments:
            self.establishment.addItem(e.name, e.id)

        self._refresh_groups()

    def _refresh_groups(self) -> None:
        """Only groups of the selected category are offered."""
        category_id = self.category.currentData()
        self.group.clear()
        self.group.addItem("", None)
        if category_id:
            for g in self.snapshot.groups:
                if g.category_id == category_id:
                    self.group.addItem(g.name, g.id)
        self._refresh_subgroups()

    def _refresh_subgroups(self) -> None:
        group_id = self.group.currentData()
        self.subgroup.clear()
        self.subgroup.addItem("", None)
        if group_id:
            for s in self.snapshot.subgroups:
                if s.group_id == group_id:
                    self.subgroup.addItem(s.name, s.id)

    @staticmethod
    def _select_data(combo: QComboBox, value) -> None:
        idx = combo.findData(value)
        if idx >= 0:
            combo.setCurrentIndex(idx)

    def _load_transaction(self, tx: Transaction) -> None:
        self._select_data(self.type, tx.type)
        self._select_data(self.frequency, tx.frequency)
        amount = parse_amount(tx.amount)
        self.amount.setValue(amount if amount is not None else 0.0)
        day = coerce_date(tx.date)
        if day is not None:
            self.date.setDate(QDate(day.year, day.month, day.day))
        # category first: it repopulates the group list, which repopulates subgroups
        self._select_data(self.category, tx.category_id)
        self._select_data(self.group, tx.group_id)
        self._select_data(self.subgroup, tx.subgroup_id)
        self._select_data(self.establishment, tx.establishment_id)
        self.description.setText(tx.description or "")

    def build_transaction(self) -> Transaction:
        """Build a Transaction from the current field values."""
        stamp = now_iso()
        values = dict(
            type=self.type.currentData(),
            frequency=self.frequency.currentData(),
            amount=round(float(self.amount.value()), 2),
            date=self.date.date().toString("yyyy-MM-dd"),
            category_id=self.category.currentData(),
            group_id=self.group.currentData(),
            subgroup_id=self.subgroup.currentData(),
            establishment_id=self.establishment.currentData(),
            description=self.description.text().strip(),
        )
        if self._original is not None:
            return replace(self._original, updated_at=stamp, **values)
        return Transaction(id=new_transaction_id(), created_at=stamp, updated_at=stamp, **values)

    def save_transaction(self) -> None:
        """Validate, then accept the dialog."""
        tx = self.build_transaction()
        errors = tx.validate()
        if errors:
            QMessageBox.warning(self, "Validation", "\n".join(errors))
            return
        self._transaction = tx
        self.accept()

    def get_transaction(self) -> Optional[Transaction]:
        return self._transaction
