from __future__ import annotations

from typing import Callable

from PyQt6.QtCore import QObject, QTimer


class QtScheduledCall:
    def __init__(self, parent: QObject | None, delay_ms: int, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._done = False
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self._fire)
        self._timer.start()

    def cancel(self) -> None:
        if self._done:
            return
        self._done = True
        self._timer.stop()
        self._timer.deleteLater()

    def _fire(self) -> None:
        if self._done:
            return
        self._done = True
        self._timer.deleteLater()
        self._callback()


class QtScheduler:
    """One-shot delayed calls on the Qt event loop; each call can be cancelled."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> QtScheduledCall:
        return QtScheduledCall(self._parent, delay_ms, callback)
