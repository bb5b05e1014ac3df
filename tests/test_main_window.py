from dataclasses import replace
from datetime import date

import pytest

from PyQt6 import QtWidgets

import config
from database.db_manager import DatabaseManager
from database.repositories import Snapshot, UserRepositories
from models.category import Category
from models.establishment import Establishment
from models.group import Group, Subgroup
from models.transaction import Transaction
from ui.category_detail import CategoryDetailDialog
from ui.data_events import DataEvents
from ui.main_window import MainWindow
from ui.transaction_form import TransactionForm

EMAIL = "ana@example.com"
TODAY = date(2024, 3, 15)


@pytest.fixture(autouse=True)
def isolated_db_path(tmp_path, monkeypatch):
    """Never attach the user's real database from a test."""
    monkeypatch.setattr(config, "DATABASE_PATH", tmp_path / "absent.db")


@pytest.fixture
def store(tmp_path):
    dm = DatabaseManager(tmp_path / "window.db")
    dm.ensure_database()
    repos = UserRepositories(dm, EMAIL)
    repos.categories.add(Category(id="c1", description="Food"))
    repos.transactions.add(Transaction(id="t1", type="income", amount=1000, date="2024-03-01"))
    repos.transactions.add(Transaction(id="t2", type="expense", amount="250", date="2024-03-05", category_id="c1"))
    return dm


def make_window(qtbot, store, events=None):
    mw = MainWindow(db_manager=store, user_email=EMAIL, events=events, clock=lambda: TODAY)
    qtbot.addWidget(mw)
    qtbot.waitUntil(lambda: mw.status.currentMessage() == "Data loaded", timeout=3000)
    return mw


def test_window_title_and_statusbar(qtbot):
    mw = MainWindow()
    qtbot.addWidget(mw)
    # Title contains app name and version
    assert config.APP_NAME in mw.windowTitle()
    assert config.APP_VERSION in mw.windowTitle()
    # Status bar default message
    assert mw.status.currentMessage() == "Ready"
    assert mw.repositories is None


def test_apply_stylesheet_applies_content(qtbot, tmp_path, monkeypatch):
    qss = tmp_path / "test_styles.qss"
    qss.write_text("QWidget { background-color: rgb(18,52,86); }", encoding="utf-8")
    monkeypatch.setattr("ui.main_window.STYLESHEET_PATH", qss)

    mw = MainWindow()
    qtbot.addWidget(mw)

    assert "background-color" in mw.styleSheet()


def test_run_db_task_executes_and_calls_on_done(qtbot):
    mw = MainWindow()
    qtbot.addWidget(mw)

    results = []
    mw.run_db_task(lambda a, b: a + b, results.append, 1, 2)

    qtbot.waitUntil(lambda: len(results) == 1, timeout=2000)
    assert results[0] == 3


def test_load_data_without_database_shows_message(qtbot):
    mw = MainWindow()
    qtbot.addWidget(mw)

    mw.load_data()
    assert mw.status.currentMessage() == "No database available"


def test_startup_load_computes_indicators(qtbot, store):
    mw = make_window(qtbot, store)

    assert mw.indicators.current_month_income == 1000
    assert mw.indicators.current_month_expenses == 250
    assert mw.indicators.current_month_balance == 750
    assert mw.tx_table.rowCount() == 2
    # newest first
    assert mw.tx_table.item(0, 0).text() == "t2"
    assert mw.tx_table.item(0, 4).text() == "Food"
    assert mw.tx_table.item(0, 5).text() == "R$ 250,00"


def test_stale_load_is_discarded(qtbot, store, monkeypatch):
    mw = make_window(qtbot, store)

    pending = []
    monkeypatch.setattr(mw, "run_db_task", lambda fn, on_done=None, *a, **kw: pending.append(on_done))

    mw.load_data()
    mw.load_data()
    assert len(pending) == 2

    newest = Snapshot(transactions=[Transaction(id="new", type="income", amount=5, date="2024-03-02")])
    oldest = Snapshot(transactions=[Transaction(id="old", type="income", amount=9, date="2024-03-02")])
    pending[1](newest)
    pending[0](oldest)

    assert [t.id for t in mw.snapshot.transactions] == ["new"]
    assert mw.indicators.current_month_income == 5


def test_change_notification_reloads_dashboard(qtbot, store):
    events = DataEvents()
    mw = make_window(qtbot, store, events=events)

    UserRepositories(store, EMAIL).transactions.add(
        Transaction(id="t3", type="expense", amount=50, date="2024-03-10")
    )
    events.notify()

    qtbot.waitUntil(lambda: mw.tx_table.rowCount() == 3, timeout=3000)
    assert mw.indicators.current_month_expenses == 300


def test_mutation_notifies_only_on_success(qtbot, monkeypatch):
    events = DataEvents()
    mw = MainWindow(events=events)
    qtbot.addWidget(mw)

    notified = []
    events.subscribe(lambda: notified.append(True))
    monkeypatch.setattr(mw, "run_db_task", lambda fn, on_done=None, *a: on_done(fn(*a)))
    errors = []
    monkeypatch.setattr(mw, "show_error", lambda title, msg, exc=None: errors.append(title))

    mw._mutate(lambda x: x == 1, "Saved", "Save failed", 1)
    assert notified == [True]
    assert errors == []

    mw._mutate(lambda x: x == 1, "Saved", "Save failed", 2)
    assert notified == [True]
    assert errors == ["Save failed"]


def test_edit_without_selection_asks_to_select(qtbot, store, monkeypatch):
    mw = make_window(qtbot, store)
    shown = []
    monkeypatch.setattr(QtWidgets.QMessageBox, "information", lambda *a, **kw: shown.append(a[1]))

    mw.tx_table.clearSelection()
    mw.on_edit_clicked()

    assert shown == ["Select transaction"]
    assert mw.status.currentMessage() == "No transaction selected"


def test_delete_selected_transaction(qtbot, store, monkeypatch):
    mw = make_window(qtbot, store)
    monkeypatch.setattr(
        QtWidgets.QMessageBox, "question",
        lambda *a, **kw: QtWidgets.QMessageBox.StandardButton.Yes,
    )

    mw.tx_table.selectRow(0)
    mw.on_delete_clicked()

    qtbot.waitUntil(lambda: mw.tx_table.rowCount() == 1, timeout=3000)
    assert mw.tx_table.item(0, 0).text() == "t1"
    assert UserRepositories(store, EMAIL).transactions.get("t2") is None


def use_register_form(monkeypatch, make_item):
    """Replace the register dialog with one that accepts `make_item(existing)`."""
    opened = []

    class _AcceptingForm:
        def __init__(self, parent=None, kind=None, snapshot=None, item=None):
            opened.append((kind, item))
            self._item = make_item(item)

        def exec(self):
            return True

        def get_item(self):
            return self._item

    monkeypatch.setattr("ui.main_window.RegisterForm", _AcceptingForm)
    return opened


def pick_first(monkeypatch):
    monkeypatch.setattr(QtWidgets.QInputDialog, "getItem", lambda *a, **kw: (a[3][0], True))


def confirm(monkeypatch):
    monkeypatch.setattr(
        QtWidgets.QMessageBox, "question",
        lambda *a, **kw: QtWidgets.QMessageBox.StandardButton.Yes,
    )


def test_group_and_subgroup_lifecycle(qtbot, store, monkeypatch):
    mw = make_window(qtbot, store)
    repos = UserRepositories(store, EMAIL)

    use_register_form(monkeypatch, lambda item: Group(id="g1", name="Market", category_id="c1"))
    mw.on_new_register_clicked("group")
    qtbot.waitUntil(lambda: len(mw.snapshot.groups) == 1, timeout=3000)

    use_register_form(monkeypatch, lambda item: Subgroup(id="s1", name="Fruit", group_id="g1"))
    mw.on_new_register_clicked("subgroup")
    qtbot.waitUntil(lambda: len(mw.snapshot.subgroups) == 1, timeout=3000)

    # the transaction form now offers them
    form = TransactionForm(snapshot=mw.snapshot)
    form.category.setCurrentIndex(form.category.findData("c1"))
    form.group.setCurrentIndex(form.group.findData("g1"))
    assert form.subgroup.findData("s1") > 0
    form.deleteLater()

    pick_first(monkeypatch)
    opened = use_register_form(monkeypatch, lambda item: replace(item, name="Supermarket"))
    mw.on_edit_register_clicked("group")
    assert opened[0][0] == "group"
    assert opened[0][1].id == "g1"
    qtbot.waitUntil(lambda: mw.snapshot.groups[0].name == "Supermarket", timeout=3000)
    assert repos.groups.get("g1").category_id == "c1"

    confirm(monkeypatch)
    mw.on_delete_register_clicked("subgroup")
    qtbot.waitUntil(lambda: mw.snapshot.subgroups == [], timeout=3000)
    assert repos.groups.get("g1") is not None


def test_category_edit_round_trip_and_delete_falls_back_to_outros(qtbot, store, monkeypatch):
    mw = make_window(qtbot, store)
    repos = UserRepositories(store, EMAIL)
    pick_first(monkeypatch)

    use_register_form(monkeypatch, lambda item: replace(item, description="Groceries", info="weekly shop"))
    mw.on_edit_register_clicked("category")
    qtbot.waitUntil(lambda: mw.tx_table.item(0, 4).text() == "Groceries", timeout=3000)
    assert repos.categories.get("c1").info == "weekly shop"
    assert mw.indicators.expenses_by_category[0].name == "Groceries"

    confirm(monkeypatch)
    mw.on_delete_register_clicked("category")
    qtbot.waitUntil(lambda: mw.snapshot.categories == [], timeout=3000)
    # no cascade: the transaction keeps its reference and is shown under the fallback
    assert repos.transactions.get("t2").category_id == "c1"
    assert mw.tx_table.item(0, 4).text() == "Outros"
    assert mw.indicators.expenses_by_category[0].name == "Outros"


def test_establishment_full_fields_round_trip(qtbot, store, monkeypatch):
    mw = make_window(qtbot, store)
    repos = UserRepositories(store, EMAIL)

    use_register_form(monkeypatch, lambda item: Establishment(
        id="e1", name="Corner shop", category="Supermercado", address="Rua A, 10", phone="555-0101",
    ))
    mw.on_new_register_clicked("establishment")
    qtbot.waitUntil(lambda: len(mw.snapshot.establishments) == 1, timeout=3000)

    pick_first(monkeypatch)
    use_register_form(monkeypatch, lambda item: replace(item, phone="555-0202"))
    mw.on_edit_register_clicked("establishment")
    qtbot.waitUntil(lambda: mw.snapshot.establishments[0].phone == "555-0202", timeout=3000)
    stored = repos.establishments.get("e1")
    assert (stored.address, stored.category) == ("Rua A, 10", "Supermercado")

    confirm(monkeypatch)
    mw.on_delete_register_clicked("establishment")
    qtbot.waitUntil(lambda: mw.snapshot.establishments == [], timeout=3000)


def test_edit_register_with_nothing_stored(qtbot, store, monkeypatch):
    mw = make_window(qtbot, store)
    shown = []
    monkeypatch.setattr(QtWidgets.QMessageBox, "information", lambda *a, **kw: shown.append(a[1]))
    opened = use_register_form(monkeypatch, lambda item: item)

    mw.on_edit_register_clicked("subgroup")

    assert shown == ["No subgroup"]
    assert opened == []


def test_category_slice_opens_details(qtbot, store, monkeypatch):
    mw = make_window(qtbot, store)
    opened = []
    monkeypatch.setattr(CategoryDetailDialog, "exec", lambda self: opened.append(self) or 0)

    mw.dashboard.category_selected.emit("Food")

    assert len(opened) == 1
    dialog = opened[0]
    assert dialog.category_name == "Food"
    assert [t.id for t in dialog.transactions] == ["t2"]
    assert dialog.table.item(0, 3).text() == "R$ 250,00"
