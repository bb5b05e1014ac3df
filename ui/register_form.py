'''
    File Name: register_form.py
    Version: 1.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''
from dataclasses import replace
from typing import Any, List, Optional

from PyQt6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QFormLayout,
    QLineEdit,
    QComboBox,
    QPushButton,
    QHBoxLayout,
    QMessageBox,
)

from config import DEFAULT_ESTABLISHMENT_CATEGORIES
from database.repositories import Snapshot
from models.category import Category
from models.establishment import Establishment
from models.group import Group, Subgroup
from models.transaction import new_transaction_id, now_iso

CATEGORY = "category"
ESTABLISHMENT = "establishment"
GROUP = "group"
SUBGROUP = "subgroup"

REGISTER_TITLES = {
    CATEGORY: "Category",
    ESTABLISHMENT: "Establishment",
    GROUP: "Group",
    SUBGROUP: "Subgroup",
}

# Snapshot and UserRepositories share these attribute names
REGISTER_COLLECTIONS = {
    CATEGORY: "categories",
    ESTABLISHMENT: "establishments",
    GROUP: "groups",
    SUBGROUP: "subgroups",
}

_MODELS = {
    CATEGORY: Category,
    ESTABLISHMENT: Establishment,
    GROUP: Group,
    SUBGROUP: Subgroup,
}


def register_label(item: Any) -> str:
    """Display name of a category, establishment, group or subgroup."""
    if isinstance(item, Category):
        return item.description
    return item.name


class RegisterForm(QDialog):
    """Dialog to create or edit one register record.

    Usage:
        dlg = RegisterForm(parent, kind=GROUP, snapshot=snapshot)
        if dlg.exec():
            group = dlg.get_item()

    Groups must point at a category and subgroups at a group; the choices
    come from the snapshot. Persisting the result is the caller's job.
    """

    def __init__(self, parent=None, kind: str = CATEGORY, snapshot: Optional[Snapshot] = None, item: Any = None):
        super().__init__(parent)
        if kind not in _MODELS:
            raise ValueError(f"Unknown register kind: {kind}")
        self.kind = kind
        self.snapshot = snapshot or Snapshot()
        self._original = item
        self._item = None

        self.info: Optional[QLineEdit] = None
        self.establishment_kind: Optional[QComboBox] = None
        self.address: Optional[QLineEdit] = None
        self.phone: Optional[QLineEdit] = None
        self.parent_choice: Optional[QComboBox] = None
        self.description: Optional[QLineEdit] = None

        title = REGISTER_TITLES[kind]
        self.setWindowTitle(f"Edit {title}" if item is not None else f"New {title}")
        self.setup_ui()

        if item is not None:
            self._load_item(item)

    def setup_ui(self) -> None:
        layout = QVBoxLayout()
        form = QFormLayout()

        self.name = QLineEdit()
        form.addRow("Description:" if self.kind == CATEGORY else "Name:", self.name)

        if self.kind == CATEGORY:
            self.info = QLineEdit()
            form.addRow("Info:", self.info)
        elif self.kind == ESTABLISHMENT:
            self.establishment_kind = QComboBox()
            self.establishment_kind.setEditable(True)
            self.establishment_kind.addItems(DEFAULT_ESTABLISHMENT_CATEGORIES)
            self.address = QLineEdit()
            self.phone = QLineEdit()
            form.addRow("Kind:", self.establishment_kind)
            form.addRow("Address:", self.address)
            form.addRow("Phone:", self.phone)
        else:
            self.parent_choice = QComboBox()
            self.parent_choice.addItem("", None)
            if self.kind == GROUP:
                for c in self.snapshot.categories:
                    self.parent_choice.addItem(c.description, c.id)
                form.addRow("Category:", self.parent_choice)
            else:
                for g in self.snapshot.groups:
                    self.parent_choice.addItem(g.name, g.id)
                form.addRow("Group:", self.parent_choice)
            self.description = QLineEdit()
            form.addRow("Description:", self.description)

        layout.addLayout(form)

        btn_layout = QHBoxLayout()
        self.save_btn = QPushButton("Save")
        self.cancel_btn = QPushButton("Cancel")
        btn_layout.addStretch(1)
        btn_layout.addWidget(self.save_btn)
        btn_layout.addWidget(self.cancel_btn)
        layout.addLayout(btn_layout)

        self.setLayout(layout)

        self.save_btn.clicked.connect(self.save_item)
        self.cancel_btn.clicked.connect(self.reject)

    def _load_item(self, item: Any) -> None:
        self.name.setText(register_label(item))
        if self.kind == CATEGORY:
            self.info.setText(item.info)
        elif self.kind == ESTABLISHMENT:
            self.establishment_kind.setCurrentText(item.category)
            self.address.setText(item.address)
            self.phone.setText(item.phone)
        else:
            parent_id = item.category_id if self.kind == GROUP else item.group_id
            idx = self.parent_choice.findData(parent_id)
            if idx >= 0:
                self.parent_choice.setCurrentIndex(idx)
            self.description.setText(item.description)

    def build_item(self) -> Any:
        """Build the record from the current field values."""
        stamp = now_iso()
        name = self.name.text().strip()
        if self.kind == CATEGORY:
            values = dict(description=name, info=self.info.text().strip())
        elif self.kind == ESTABLISHMENT:
            values = dict(
                name=name,
                category=self.establishment_kind.currentText().strip(),
                address=self.address.text().strip(),
                phone=self.phone.text().strip(),
            )
        elif self.kind == GROUP:
            values = dict(name=name, category_id=self.parent_choice.currentData(),
                          description=self.description.text().strip())
        else:
            values = dict(name=name, group_id=self.parent_choice.currentData(),
                          description=self.description.text().strip())
        if self._original is not None:
            return replace(self._original, updated_at=stamp, **values)
        return _MODELS[self.kind](id=new_transaction_id(), created_at=stamp, updated_at=stamp, **values)

    def validate(self, item: Any) -> List[str]:
        errors: List[str] = []
        if not register_label(item):
            errors.append("A name is required.")
        if self.kind == GROUP and not item.category_id:
            errors.append("Choose the category this group belongs to.")
        if self.kind == SUBGROUP and not item.group_id:
            errors.append("Choose the group this subgroup belongs to.")
        return errors

    def save_item(self) -> None:
        """Validate, then accept the dialog."""
        item = self.build_item()
        errors = self.validate(item)
        if errors:
            QMessageBox.warning(self, "Validation", "\n".join(errors))
            return
        self._item = item
        self.accept()

    def get_item(self) -> Any:
        return self._item
