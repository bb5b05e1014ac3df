'''
    File Name: main.py
    Version: 3.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''
import sys
import logging

from PyQt6 import QtWidgets

from config import APP_NAME, APP_VERSION, LOGGING_CONFIG, USER_EMAIL, ensure_data_dir
from database.db_manager import DatabaseManager
from ui.data_events import DataEvents
from ui.main_window import MainWindow

logging.basicConfig(**LOGGING_CONFIG)
logger = logging.getLogger(__name__)


def main() -> int:
    # Ensure runtime dirs exist early
    try:
        ensure_data_dir()
    except Exception:
        logger.exception("Failed to ensure data directory exists")

    app = QtWidgets.QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)

    # Friendly global exception hook that logs and shows a dialog
    def _excepthook(exc_type, exc_value, exc_tb):
        logger.error("Uncaught exception", exc_info=(exc_type, exc_value, exc_tb))
        try:
            QtWidgets.QMessageBox.critical(None, "Unhandled Exception", str(exc_value))
        except Exception:
            logger.debug("Could not show the error dialog")
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _excepthook

    db_manager = DatabaseManager()
    db_manager.ensure_database()
    events = DataEvents()
    logger.info("Starting %s %s for %s", APP_NAME, APP_VERSION, USER_EMAIL)

    window = MainWindow(db_manager=db_manager, user_email=USER_EMAIL, events=events)
    window.show()

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
