'''
    File Name: data_events.py
    Version: 1.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''
from typing import Callable

from PyQt6 import QtCore


class DataEvents(QtCore.QObject):
    """Tells interested views that the stored data changed.

    One instance is created by the application and handed to every window
    that mutates or displays data.
    """

    changed = QtCore.pyqtSignal()

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Connect `callback`; returns a function that disconnects it."""
        self.changed.connect(callback)

        def _unsubscribe() -> None:
            try:
                self.changed.disconnect(callback)
            except TypeError:
                # already disconnected
                pass

        return _unsubscribe

    def notify(self) -> None:
        self.changed.emit()
