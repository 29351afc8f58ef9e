from __future__ import annotations

from PyQt6.QtCore import QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import QWidget

FOCUS_COLOR = QColor("#eb8f60")
BREAK_COLOR = QColor("#6fb3a8")
TRACK_COLOR = QColor(255, 255, 255, 180)


class ProgressRing(QWidget):
    """Circular countdown: the arc shrinks as the phase runs out."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setMinimumSize(260, 260)
        self._fraction_left = 0.0
        self._is_focus = True
        self._text = "00:00"

    def set_state(self, fraction_left: float, is_focus: bool, text: str) -> None:
        self._fraction_left = max(0.0, min(1.0, fraction_left))
        self._is_focus = is_focus
        self._text = text
        self.update()

    def paintEvent(self, event) -> None:  # noqa: N802
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        side = min(self.width(), self.height()) - 24
        rect = QRectF((self.width() - side) / 2, (self.height() - side) / 2, side, side)

        painter.setPen(QPen(TRACK_COLOR, 10))
        painter.drawEllipse(rect)

        color = FOCUS_COLOR if self._is_focus else BREAK_COLOR
        painter.setPen(QPen(color, 10, Qt.PenStyle.SolidLine, Qt.PenCapStyle.RoundCap))
        span = int(-360 * 16 * self._fraction_left)
        painter.drawArc(rect, 90 * 16, span)

        font = QFont(self.font())
        font.setPointSize(max(12, int(side / 7)))
        font.setBold(True)
        painter.setFont(font)
        painter.setPen(QColor("#2d2824"))
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, self._text)
