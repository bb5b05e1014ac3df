'''
    File Name: main_window.py
    Version: 3.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''
from datetime import date
from pathlib import Path
import logging
from typing import Any, Callable, Optional

from PyQt6 import QtWidgets, QtGui, QtCore
from config import APP_NAME, APP_VERSION, STYLESHEET_PATH, USER_EMAIL, ensure_data_dir

# Local UI components
from .category_detail import CategoryDetailDialog
from .dashboard_view import DashboardView, format_currency
from .data_events import DataEvents
from .register_form import (
    CATEGORY,
    ESTABLISHMENT,
    GROUP,
    REGISTER_COLLECTIONS,
    REGISTER_TITLES,
    SUBGROUP,
    RegisterForm,
    register_label,
)
from .transaction_form import TransactionForm
from core.indicators import category_names, category_transactions, compute_indicators, resolve_category_name
from database.backup import backup_to_json, export_transactions_csv, reset_user_data, restore_from_json
from database.db_manager import DatabaseManager
from database.repositories import Snapshot, UserRepositories
from models.transaction import INCOME, parse_amount

logger = logging.getLogger(__name__)


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, *args, db_manager: Optional[Any] = None, user_email: Optional[str] = None,
                 events: Optional[DataEvents] = None, clock: Optional[Callable[[], date]] = None, **kwargs):
        super().__init__(*args, **kwargs)

        # Ensure runtime data dir exists (safe)
        try:
            ensure_data_dir()
        except Exception:
            logger.exception("Failed ensuring data directory")

        # Window metadata and status bar
        try:
            self.setWindowTitle(f"{APP_NAME} - {APP_VERSION}")
        except Exception:
            logger.exception("Failed to set window title")

        self.status = self.statusBar()
        self.status.showMessage("Ready")

        self.user_email = user_email or USER_EMAIL
        # "today" is injected so the dashboard can be computed for any date
        self.clock = clock or date.today
        self.events = events if events is not None else DataEvents(self)
        self._unsubscribe = self.events.subscribe(self.load_data)

        # DB manager may be injected by the app
        self.db_manager = db_manager
        self.repositories: Optional[UserRepositories] = None
        self.snapshot = Snapshot()
        self.indicators = None
        self.reference_date: Optional[date] = None
        # Each load gets a sequence number; only the newest one is rendered
        self._load_seq = 0
        self._highlighted_row = None
        self.ensure_db_ready()

        # Thread pool for background tasks
        self._pool = QtCore.QThreadPool.globalInstance()

        # Apply stylesheet if present (non-fatal)
        try:
            self._apply_stylesheet()
        except Exception:
            logger.exception("Failed to apply stylesheet")

        central_widget = QtWidgets.QWidget()
        self.setCentralWidget(central_widget)

        main_layout = QtWidgets.QVBoxLayout()
        main_layout.setSpacing(15)
        main_layout.setContentsMargins(10, 10, 10, 10)

        self.dashboard = DashboardView(self)
        main_layout.addWidget(self.dashboard)
        self.dashboard.category_selected.connect(self.show_category_details)

        # Transactions table (select rows to edit/delete)
        self.tx_table = QtWidgets.QTableWidget(0, 6)
        self.tx_table.setHorizontalHeaderLabels(["ID", "Date", "Type", "Description", "Category", "Amount"])
        self.tx_table.horizontalHeader().setStretchLastSection(True)
        self.tx_table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectionBehavior.SelectRows)
        self.tx_table.setSelectionMode(QtWidgets.QAbstractItemView.SelectionMode.SingleSelection)
        self.tx_table.setEditTriggers(QtWidgets.QAbstractItemView.EditTrigger.NoEditTriggers)
        self.tx_table.verticalHeader().setVisible(False)
        main_layout.addWidget(self.tx_table)
        self.tx_table.selectionModel().selectionChanged.connect(self._on_table_selection_changed)

        # Transactions group
        transaction_group = QtWidgets.QGroupBox("Transactions")
        t_layout = QtWidgets.QHBoxLayout()
        self.button1 = QtWidgets.QPushButton("Add")
        self.button2 = QtWidgets.QPushButton("Edit")
        self.button3 = QtWidgets.QPushButton("Delete")
        t_layout.addWidget(self.button1)
        t_layout.addWidget(self.button2)
        t_layout.addWidget(self.button3)
        transaction_group.setLayout(t_layout)
        main_layout.addWidget(transaction_group)

        # Registers / Utilities group
        utility_group = QtWidgets.QGroupBox("Registers & Utilities")
        u_layout = QtWidgets.QHBoxLayout()
        # each register button opens a New / Edit / Delete menu
        self.button4 = self._register_button("Categories", CATEGORY)
        self.button5 = self._register_button("Establishments", ESTABLISHMENT)
        self.button7 = self._register_button("Groups", GROUP)
        self.button8 = self._register_button("Subgroups", SUBGROUP)
        self.button6 = QtWidgets.QPushButton("Backup/Export")
        u_layout.addWidget(self.button4)
        u_layout.addWidget(self.button5)
        u_layout.addWidget(self.button7)
        u_layout.addWidget(self.button8)
        u_layout.addWidget(self.button6)
        utility_group.setLayout(u_layout)
        main_layout.addWidget(utility_group)

        # Connect buttons to their dedicated handlers
        self.button1.clicked.connect(self.on_add_clicked)
        self.button2.clicked.connect(self.on_edit_clicked)
        self.button3.clicked.connect(self.on_delete_clicked)
        self.button6.clicked.connect(self.on_backup_export_clicked)

        central_widget.setLayout(main_layout)

        # If a database exists, attach it and load data immediately so the
        # dashboard shows existing data on startup. Do NOT create a new DB here.
        try:
            if not getattr(self, "db_manager", None):
                dm = DatabaseManager()
                if dm.db_path.exists():
                    self.db_manager = dm
                    self.ensure_db_ready()
            if getattr(self, "db_manager", None):
                try:
                    self.load_data()
                except Exception:
                    logger.exception("Failed loading data on startup")
        except Exception:
            logger.exception("Failed to attach existing DatabaseManager on startup")

        # Restore/Set initial window size (remember last state with QSettings)
        try:
            settings = QtCore.QSettings("pbm", APP_NAME)
            geom = settings.value("geometry", None)
            if isinstance(geom, (bytes, bytearray)):
                geom = QtCore.QByteArray(bytes(geom))
            if isinstance(geom, QtCore.QByteArray) and not geom.isEmpty():
                self.restoreGeometry(geom)
            else:
                self.resize(1200, 900)
                self.setMinimumSize(800, 600)
        except Exception:
            logger.exception("Failed to restore/set window geometry")

    def _apply_stylesheet(self) -> None:
        """Load and apply a stylesheet if the file exists; otherwise skip quietly."""
        path = Path(STYLESHEET_PATH)
        if path.exists():
            try:
                with path.open("r", encoding="utf-8") as f:
                    self.setStyleSheet(f.read())
                logger.debug("Applied stylesheet: %s", path)
            except Exception:
                logger.exception("Error reading/applying stylesheet")
        else:
            logger.debug("Stylesheet not found at %s; skipping", path)

    def show_error(self, title: str, message: str, exc: Optional[Exception] = None) -> None:
        """Log and present a critical message box to the user."""
        if exc:
            logger.exception("%s: %s", title, message)
        else:
            logger.error("%s: %s", title, message)
        QtWidgets.QMessageBox.critical(self, title, message)

    def run_db_task(self, fn: Callable[..., Any], on_done: Optional[Callable[[Any], None]] = None, *args, **kwargs) -> None:
        """
        Run a blocking function in a background thread and call on_done(result) in the main thread.
        Usage: self.run_db_task(self.repositories.load_snapshot, self._on_snapshot_loaded)
        """
        class _Signals(QtCore.QObject):
            finished = QtCore.pyqtSignal(object)
            error = QtCore.pyqtSignal(object)

        class _Runner(QtCore.QRunnable):
            def __init__(self, func, a, kw):
                super().__init__()
                self.func = func
                self.args = a
                self.kwargs = kw
                self.signals = _Signals()

            @QtCore.pyqtSlot()
            def run(self):
                try:
                    res = self.func(*self.args, **self.kwargs)
                    self.signals.finished.emit(res)
                except Exception as e:
                    self.signals.error.emit(e)

        runner = _Runner(fn, args, kwargs)

        if on_done:
            # ensure callback runs in main thread
            runner.signals.finished.connect(on_done)

        def _on_err(e):
            self.show_error("Background task error", str(e), exc=e)
        runner.signals.error.connect(_on_err)

        self._pool.start(runner)

    # --- Storage ---
    def ensure_db_ready(self) -> None:
        """Ensure the injected database is initialized and build the user's repositories."""
        if self.db_manager is None:
            return
        try:
            if hasattr(self.db_manager, "ensure_database"):
                self.db_manager.ensure_database()
            else:
                logger.debug("Injected db_manager has no ensure_database(); not creating DB")
        except Exception:
            logger.exception("Failed to ensure database exists via injected db_manager")
        self.repositories = UserRepositories(self.db_manager, self.user_email)

    def _require_repositories(self, action: str) -> bool:
        """Create the default database on first use. Returns False if unavailable."""
        if self.repositories is not None:
            return True
        try:
            self.db_manager = DatabaseManager()
            self.ensure_db_ready()
        except Exception:
            logger.exception("Failed creating/initializing DatabaseManager for %s", action)
            self.show_error("No database", f"No database available to {action}")
            return False
        return self.repositories is not None

    def load_data(self) -> None:
        """Reload every collection in the background and recompute the dashboard."""
        if self.repositories is None:
            logger.warning("No db_manager available to load data")
            self.status.showMessage("No database available")
            return

        self._load_seq += 1
        seq = self._load_seq
        self.status.showMessage("Loading data...")

        def _on_loaded(result):
            if seq != self._load_seq:
                logger.debug("Discarding stale load %d (latest is %d)", seq, self._load_seq)
                return
            if not isinstance(result, Snapshot):
                self.show_error("Load failed", "Failed to load data")
                self.status.showMessage("Load failed")
                return
            try:
                self.apply_snapshot(result)
                self.status.showMessage("Data loaded")
            except Exception as e:
                self.show_error("UI update failed", "Failed updating the dashboard", e)

        self.run_db_task(self.repositories.load_snapshot, _on_loaded)

    def apply_snapshot(self, snapshot: Snapshot) -> None:
        """Compute indicators for `snapshot` and refresh every view."""
        self.snapshot = snapshot
        self.reference_date = self.clock()
        self.indicators = compute_indicators(
            snapshot.transactions, snapshot.categories, snapshot.establishments, self.reference_date
        )
        self.dashboard.set_indicators(self.indicators)
        self._populate_transactions(snapshot)

    def update_text(self, message: str):
        self.status.showMessage(message)
        logger.info(message)

    def _populate_transactions(self, snapshot: Snapshot):
        """Populate the transactions table, newest first."""
        try:
            rows = sorted(snapshot.transactions, key=lambda t: str(t.date or ""), reverse=True)
            names = category_names(snapshot.categories)
            self.tx_table.setRowCount(len(rows))
            for r_idx, tx in enumerate(rows):
                amount = parse_amount(tx.amount)
                amount_text = format_currency(amount) if amount is not None else str(tx.amount)
                values = [
                    tx.id,
                    str(tx.date or ""),
                    "Income" if tx.type == INCOME else "Expense",
                    tx.description,
                    resolve_category_name(tx.category_id, names),
                    amount_text,
                ]
                for col, value in enumerate(values):
                    self.tx_table.setItem(r_idx, col, QtWidgets.QTableWidgetItem(str(value)))
            self.tx_table.resizeColumnsToContents()
            self._highlighted_row = None
        except Exception:
            logger.exception("Failed populating transactions table")

    def _get_selected_transaction_id(self) -> Optional[str]:
        """Return the transaction ID for the currently selected row, or None."""
        row = self._get_selected_row_index()
        if row is None:
            return None
        item = self.tx_table.item(row, 0)
        return item.text() if item else None

    def _get_selected_row_index(self) -> Optional[int]:
        sel = self.tx_table.selectionModel().selectedRows()
        if not sel:
            return None
        return sel[0].row()

    def _on_table_selection_changed(self):
        """Highlight the selected row whenever selection changes."""
        row_idx = self._get_selected_row_index()
        if row_idx is None:
            return
        try:
            if self._highlighted_row is not None and self._highlighted_row != row_idx:
                for col in range(self.tx_table.columnCount()):
                    item = self.tx_table.item(self._highlighted_row, col)
                    if item:
                        item.setBackground(QtGui.QBrush())
            brush = QtGui.QBrush(QtGui.QColor(173, 216, 230))  # light blue
            for col in range(self.tx_table.columnCount()):
                item = self.tx_table.item(row_idx, col)
                if item:
                    item.setBackground(brush)
            self._highlighted_row = row_idx
        except Exception:
            logger.exception("Failed highlighting selected row")

    def closeEvent(self, event):
        try:
            settings = QtCore.QSettings("pbm", APP_NAME)
            settings.setValue("geometry", self.saveGeometry())
        except Exception:
            logger.exception("Failed to save window geometry")
        self._unsubscribe()
        super().closeEvent(event)

    def _mutate(self, fn: Callable[..., Any], success: str, failure: str, *args) -> None:
        """Run a repository write in the background and announce the change."""
        def _on_done(res):
            if not res:
                self.show_error(failure, f"{failure}.")
                self.status.showMessage(failure)
                return
            self.update_text(success)
            self.events.notify()

        self.run_db_task(fn, _on_done, *args)

    # --- Transactions ---
    def on_add_clicked(self) -> None:
        """Open the transaction form and save the new entry."""
        logger.debug("on_add_clicked")
        if not self._require_repositories("save transaction"):
            return
        try:
            dlg = TransactionForm(self, snapshot=self.snapshot)
        except Exception:
            logger.exception("Failed creating TransactionForm")
            self.show_error("Error", "Unable to open transaction form")
            return

        if dlg.exec():
            tx = dlg.get_transaction()
            if tx is None:
                self.status.showMessage("No transaction data")
                return
            self._mutate(self.repositories.transactions.add, f"Transaction added (id={tx.id})",
                         "Save failed", tx)

    def on_edit_clicked(self) -> None:
        logger.debug("on_edit_clicked")
        if not self._require_repositories("edit transaction"):
            return

        tx_id = self._get_selected_transaction_id()
        current = next((t for t in self.snapshot.transactions if t.id == tx_id), None)
        if current is None:
            QtWidgets.QMessageBox.information(self, "Select transaction", "Please select a transaction to edit from the table.")
            self.status.showMessage("No transaction selected")
            return

        dlg = TransactionForm(self, snapshot=self.snapshot, transaction=current)
        if dlg.exec():
            updated = dlg.get_transaction()
            if updated is None:
                self.status.showMessage("No changes made")
                return
            self._mutate(self.repositories.transactions.update, f"Transaction updated (id={tx_id})",
                         "Update failed", updated)

    def on_delete_clicked(self) -> None:
        """Delete the selected transaction after confirmation."""
        logger.debug("on_delete_clicked")
        if not self._require_repositories("delete transaction"):
            return

        tx_id = self._get_selected_transaction_id()
        if tx_id is None:
            QtWidgets.QMessageBox.information(self, "Select transaction", "Please select a transaction to delete from the table.")
            self.status.showMessage("No transaction selected")
            return

        reply = QtWidgets.QMessageBox.question(
            self,
            "Confirm delete",
            f"Are you sure you want to delete transaction id={tx_id}?",
            QtWidgets.QMessageBox.StandardButton.Yes | QtWidgets.QMessageBox.StandardButton.No,
        )
        if reply != QtWidgets.QMessageBox.StandardButton.Yes:
            self.status.showMessage("Delete cancelled")
            return

        self._mutate(self.repositories.transactions.delete, f"Transaction deleted (id={tx_id})",
                     "Delete failed", tx_id)

    # --- Registers (categories, establishments, groups, subgroups) ---
    def _register_button(self, text: str, kind: str) -> QtWidgets.QPushButton:
        button = QtWidgets.QPushButton(text)
        menu = QtWidgets.QMenu(button)
        menu.addAction("New...").triggered.connect(lambda checked=False, k=kind: self.on_new_register_clicked(k))
        menu.addAction("Edit...").triggered.connect(lambda checked=False, k=kind: self.on_edit_register_clicked(k))
        menu.addAction("Delete...").triggered.connect(lambda checked=False, k=kind: self.on_delete_register_clicked(k))
        button.setMenu(menu)
        return button

    def _register_repository(self, kind: str):
        return getattr(self.repositories, REGISTER_COLLECTIONS[kind])

    def _choose_register(self, kind: str, action: str) -> Optional[Any]:
        """Ask which record of `kind` to act on. Returns None when there is none or the user cancels."""
        title = REGISTER_TITLES[kind]
        items = list(getattr(self.snapshot, REGISTER_COLLECTIONS[kind]))
        if not items:
            QtWidgets.QMessageBox.information(self, f"No {title.lower()}", f"There is no {title.lower()} to {action}.")
            self.status.showMessage(f"No {title.lower()} to {action}")
            return None
        labels = [f"{register_label(item)} (id={item.id})" for item in items]
        choice, ok = QtWidgets.QInputDialog.getItem(
            self, f"{action.capitalize()} {title.lower()}", f"{title}:", labels, 0, False
        )
        if not ok or choice not in labels:
            self.status.showMessage(f"{title} {action} cancelled")
            return None
        return items[labels.index(choice)]

    def on_new_register_clicked(self, kind: str) -> None:
        logger.debug("on_new_register_clicked: %s", kind)
        title = REGISTER_TITLES[kind]
        if not self._require_repositories(f"save {title.lower()}"):
            return
        dlg = RegisterForm(self, kind=kind, snapshot=self.snapshot)
        if not dlg.exec():
            self.status.showMessage(f"{title} not created")
            return
        item = dlg.get_item()
        if item is None:
            self.status.showMessage(f"{title} not created")
            return
        self._mutate(self._register_repository(kind).add, f"{title} '{register_label(item)}' created",
                     "Save failed", item)

    def on_edit_register_clicked(self, kind: str) -> None:
        logger.debug("on_edit_register_clicked: %s", kind)
        title = REGISTER_TITLES[kind]
        if not self._require_repositories(f"edit {title.lower()}"):
            return
        current = self._choose_register(kind, "edit")
        if current is None:
            return
        dlg = RegisterForm(self, kind=kind, snapshot=self.snapshot, item=current)
        if not dlg.exec():
            self.status.showMessage("No changes made")
            return
        updated = dlg.get_item()
        if updated is None:
            self.status.showMessage("No changes made")
            return
        self._mutate(self._register_repository(kind).update, f"{title} '{register_label(updated)}' updated",
                     "Update failed", updated)

    def on_delete_register_clicked(self, kind: str) -> None:
        """Delete a register record. References to it are kept and shown with fallback labels."""
        logger.debug("on_delete_register_clicked: %s", kind)
        title = REGISTER_TITLES[kind]
        if not self._require_repositories(f"delete {title.lower()}"):
            return
        current = self._choose_register(kind, "delete")
        if current is None:
            return
        reply = QtWidgets.QMessageBox.question(
            self,
            "Confirm delete",
            f"Delete {title.lower()} '{register_label(current)}'?\n"
            "Transactions that use it are kept unchanged.",
            QtWidgets.QMessageBox.StandardButton.Yes | QtWidgets.QMessageBox.StandardButton.No,
        )
        if reply != QtWidgets.QMessageBox.StandardButton.Yes:
            self.status.showMessage("Delete cancelled")
            return
        self._mutate(self._register_repository(kind).delete, f"{title} '{register_label(current)}' deleted",
                     "Delete failed", current.id)

    # --- Dashboard drill-down ---
    def show_category_details(self, category_name: str) -> None:
        """List this month's expenses of one dashboard category."""
        reference = self.reference_date or self.clock()
        try:
            rows = category_transactions(
                self.snapshot.transactions, self.snapshot.categories, category_name, reference
            )
        except ValueError as e:
            self.show_error("Category details", str(e), e)
            return
        self.status.showMessage(f"{category_name}: {len(rows)} expense(s) this month")
        dlg = CategoryDetailDialog(self, category_name, rows, self.snapshot)
        dlg.exec()

    # --- Backup / export ---
    def on_backup_export_clicked(self) -> None:
        """Offer CSV export, JSON backup, restore and reset."""
        logger.debug("on_backup_export_clicked")
        if not self._require_repositories("back up or export data"):
            return

        msg_box = QtWidgets.QMessageBox(self)
        msg_box.setWindowTitle("Backup or Export")
        msg_box.setText("What would you like to do?")
        msg_box.setIcon(QtWidgets.QMessageBox.Icon.Question)

        export_btn = msg_box.addButton("Export CSV", QtWidgets.QMessageBox.ButtonRole.AcceptRole)
        backup_btn = msg_box.addButton("Backup", QtWidgets.QMessageBox.ButtonRole.AcceptRole)
        restore_btn = msg_box.addButton("Restore", QtWidgets.QMessageBox.ButtonRole.AcceptRole)
        reset_btn = msg_box.addButton("Reset", QtWidgets.QMessageBox.ButtonRole.DestructiveRole)
        cancel_btn = msg_box.addButton(QtWidgets.QMessageBox.StandardButton.Cancel)

        msg_box.exec()
        clicked_btn = msg_box.clickedButton()

        if clicked_btn == cancel_btn or clicked_btn is None:
            self.status.showMessage("Backup/Export cancelled")
        elif clicked_btn == export_btn:
            self._handle_export()
        elif clicked_btn == backup_btn:
            self._handle_backup()
        elif clicked_btn == restore_btn:
            self._handle_restore()
        elif clicked_btn == reset_btn:
            self._handle_reset()

    def _handle_export(self) -> None:
        file_path, _ = QtWidgets.QFileDialog.getSaveFileName(
            self, "Export Transactions", f"transactions_{date.today().isoformat()}.csv",
            "CSV Files (*.csv);;All Files (*)",
        )
        if not file_path:
            self.status.showMessage("Export cancelled")
            return

        def _on_export_done(result):
            if not result:
                self.show_error("Export failed", "Failed to export transactions")
                self.status.showMessage("Export failed")
                return
            self.update_text(f"Transactions exported to {file_path}")

        self.run_db_task(export_transactions_csv, _on_export_done, self.snapshot, Path(file_path))

    def _handle_backup(self) -> None:
        file_path, _ = QtWidgets.QFileDialog.getSaveFileName(
            self, "Backup Data", f"backup_{self.user_email}_{date.today().isoformat()}.json",
            "JSON Files (*.json);;All Files (*)",
        )
        if not file_path:
            self.status.showMessage("Backup cancelled")
            return

        def _on_backup_done(result):
            if not result:
                self.show_error("Backup failed", "Failed to write backup file")
                self.status.showMessage("Backup failed")
                return
            self.update_text(f"Backup written to {file_path}")

        self.run_db_task(backup_to_json, _on_backup_done, self.repositories, Path(file_path))

    def _handle_restore(self) -> None:
        file_path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self, "Restore Backup", "", "JSON Files (*.json);;All Files (*)",
        )
        if not file_path:
            self.status.showMessage("Restore cancelled")
            return

        def _on_restore_done(result):
            if not result:
                self.show_error("Restore warning", "Nothing was restored from the file")
                self.status.showMessage("Restore completed with no data")
                return
            self.update_text(f"Restored {result} collection(s) from {file_path}")
            self.events.notify()

        self.run_db_task(restore_from_json, _on_restore_done, self.repositories, Path(file_path))

    def _handle_reset(self) -> None:
        reply = QtWidgets.QMessageBox.question(
            self,
            "Confirm reset",
            "Delete ALL of your data? This cannot be undone.",
            QtWidgets.QMessageBox.StandardButton.Yes | QtWidgets.QMessageBox.StandardButton.No,
        )
        if reply != QtWidgets.QMessageBox.StandardButton.Yes:
            self.status.showMessage("Reset cancelled")
            return

        def _on_reset_done(result):
            self.update_text(f"Removed {result} collection(s)")
            self.events.notify()

        self.run_db_task(reset_user_data, _on_reset_done, self.repositories)
