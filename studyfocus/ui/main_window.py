from __future__ import annotations

from PyQt6.QtCore import QTimer, Qt
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QAbstractSpinBox,
    QApplication,
    QCheckBox,
    QFormLayout,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from studyfocus.core.app_state import AppState
from studyfocus.core.config import BREAK_MIN_RANGE, FOCUS_MIN_RANGE, INTERVALS_RANGE, SessionConfig
from studyfocus.core.display import cycle_label, format_clock, format_record, next_break_label, phase_label
from studyfocus.core.timer import Phase, TimerSnapshot
from studyfocus.ui.progress_ring import ProgressRing

TICK_INTERVAL_MS = 1000
NOTIFICATION_TIMEOUT_MS = 5000


class MainWindow(QMainWindow):
    def __init__(self, app_state: AppState) -> None:
        super().__init__()
        self.setWindowTitle("Pomodoro Timer")
        self.resize(900, 680)

        self.app_state = app_state

        self._build_ui()
        self._connect_signals()
        self._sync_config(self.app_state.config)
        self.sound_check.blockSignals(True)
        self.sound_check.setChecked(self.app_state.sound_enabled)
        self.sound_check.blockSignals(False)

        self.tick_timer = QTimer(self)
        self.tick_timer.setInterval(TICK_INTERVAL_MS)
        self.tick_timer.timeout.connect(self.app_state.tick)
        self.tick_timer.start()

        self.refresh_history()
        self._render(self.app_state.snapshot())

    def _build_ui(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)
        root = QVBoxLayout(central)

        header = QHBoxLayout()
        title = QLabel("Pomodoro Timer")
        title.setObjectName("Heading")
        self.sound_check = QCheckBox("Beep")
        self.sound_check.setToolTip("Sound notifications")
        self.fullscreen_btn = QPushButton("Fullscreen")
        self.fullscreen_btn.setToolTip("Fullscreen (F)")
        header.addWidget(title)
        header.addStretch()
        header.addWidget(self.sound_check)
        header.addWidget(self.fullscreen_btn)
        root.addLayout(header)

        config_box = QFrame()
        config_box.setObjectName("Panel")
        config_form = QGridLayout(config_box)
        self.focus_spin = self._spin(FOCUS_MIN_RANGE)
        self.short_spin = self._spin(BREAK_MIN_RANGE)
        self.long_spin = self._spin(BREAK_MIN_RANGE)
        self.intervals_spin = self._spin(INTERVALS_RANGE)
        for column, (label, spin) in enumerate(
            [
                ("Focus (min)", self.focus_spin),
                ("Short break (min)", self.short_spin),
                ("Long break (min)", self.long_spin),
                ("Intervals before long break", self.intervals_spin),
            ]
        ):
            config_form.addWidget(QLabel(label), 0, column)
            config_form.addWidget(spin, 1, column)
        root.addWidget(config_box)

        timer_card = QFrame()
        timer_card.setObjectName("Card")
        timer_layout = QVBoxLayout(timer_card)
        self.phase_label = QLabel("Ready")
        self.phase_label.setObjectName("SubtleTitle")
        self.phase_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.ring = ProgressRing()
        controls = QHBoxLayout()
        self.toggle_btn = QPushButton("Start (Space)")
        self.toggle_btn.setObjectName("PrimaryButton")
        self.reset_btn = QPushButton("Reset")
        self.reset_btn.setObjectName("SecondaryButton")
        self.next_btn = QPushButton("Next (N)")
        self.next_btn.setObjectName("SecondaryButton")
        controls.addStretch()
        controls.addWidget(self.toggle_btn)
        controls.addWidget(self.reset_btn)
        controls.addWidget(self.next_btn)
        controls.addStretch()
        timer_layout.addWidget(self.phase_label)
        timer_layout.addWidget(self.ring, 1)
        timer_layout.addLayout(controls)
        root.addWidget(timer_card, 1)

        history_title = QLabel("Recent focus sessions")
        history_title.setObjectName("SubtleTitle")
        self.history_list = QListWidget()
        root.addWidget(history_title)
        root.addWidget(self.history_list)

        stats = QHBoxLayout()
        self.today_label = self._stat(stats, "Focus Today")
        self.next_break_label = self._stat(stats, "Next Break")
        self.cycle_label = self._stat(stats, "Cycle")
        root.addLayout(stats)

        hint = QLabel("Shortcuts: F = Fullscreen • Space = Start/Pause • N = Next")
        hint.setObjectName("MutedText")
        hint.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(hint)

        for key, handler in [
            (Qt.Key.Key_Space, self._shortcut_toggle),
            (Qt.Key.Key_N, self._shortcut_next),
            (Qt.Key.Key_F, self._shortcut_fullscreen),
        ]:
            action = QAction(self)
            action.setShortcut(QKeySequence(key))
            action.triggered.connect(handler)
            self.addAction(action)

    def _spin(self, bounds: tuple[int, int]) -> QSpinBox:
        spin = QSpinBox()
        spin.setRange(*bounds)
        # Only commit on Enter, arrows or focus loss, not on each keystroke.
        spin.setKeyboardTracking(False)
        return spin

    def _stat(self, layout: QHBoxLayout, caption: str) -> QLabel:
        box = QFrame()
        box.setObjectName("Panel")
        form = QFormLayout(box)
        value = QLabel("0")
        value.setObjectName("StatValue")
        muted = QLabel(caption)
        muted.setObjectName("MutedText")
        form.addRow(muted)
        form.addRow(value)
        layout.addWidget(box)
        return value

    def _connect_signals(self) -> None:
        self.toggle_btn.clicked.connect(self.app_state.toggle)
        self.reset_btn.clicked.connect(self.app_state.reset)
        self.next_btn.clicked.connect(self.app_state.skip)
        self.fullscreen_btn.clicked.connect(self.toggle_fullscreen)
        self.sound_check.toggled.connect(self.app_state.set_sound_enabled)
        for spin in (self.focus_spin, self.short_spin, self.long_spin, self.intervals_spin):
            spin.valueChanged.connect(self._apply_config)

        self.app_state.timer_changed.connect(self._render)
        self.app_state.history_changed.connect(self.refresh_history)
        self.app_state.config_changed.connect(self._sync_config)
        self.app_state.phase_ended.connect(self._on_phase_ended)
        self.app_state.notification.connect(self._show_notification)

    def _sync_config(self, config: SessionConfig) -> None:
        minutes = config.to_minutes()
        for spin, key in [
            (self.focus_spin, "focus"),
            (self.short_spin, "short_break"),
            (self.long_spin, "long_break"),
            (self.intervals_spin, "intervals"),
        ]:
            if spin.value() != minutes[key]:
                spin.blockSignals(True)
                spin.setValue(minutes[key])
                spin.blockSignals(False)

    def _apply_config(self, *_args) -> None:
        self.app_state.update_config(
            self.focus_spin.value(),
            self.short_spin.value(),
            self.long_spin.value(),
            self.intervals_spin.value(),
        )

    def _render(self, snapshot: TimerSnapshot) -> None:
        intervals = self.app_state.config.intervals_before_long_break
        self.phase_label.setText(phase_label(snapshot.phase))
        fraction_left = snapshot.remaining_seconds / snapshot.total_seconds if snapshot.total_seconds else 0.0
        self.ring.set_state(fraction_left, not snapshot.phase.is_break, format_clock(snapshot.remaining_seconds))

        if snapshot.is_running:
            self.toggle_btn.setText("Pause (Space)")
        elif snapshot.phase == Phase.IDLE:
            self.toggle_btn.setText("Start (Space)")
        else:
            self.toggle_btn.setText("Resume (Space)")
        self.next_btn.setEnabled(snapshot.is_running)

        self.next_break_label.setText(next_break_label(snapshot, intervals))
        self.cycle_label.setText(cycle_label(snapshot, intervals))

    def refresh_history(self) -> None:
        self.history_list.clear()
        if not self.app_state.history:
            QListWidgetItem("No sessions recorded yet.", self.history_list)
        for record in self.app_state.history:
            QListWidgetItem(format_record(record), self.history_list)
        self.today_label.setText(str(self.app_state.today_count()))

    def _on_phase_ended(self, _phase: str) -> None:
        if self.app_state.sound_enabled:
            QApplication.beep()

    def _show_notification(self, level: str, message: str) -> None:
        prefix = "⚠ " if level == "error" else ""
        self.statusBar().showMessage(f"{prefix}{message}", NOTIFICATION_TIMEOUT_MS)

    def _typing(self) -> bool:
        return isinstance(QApplication.focusWidget(), (QLineEdit, QAbstractSpinBox))

    def _shortcut_toggle(self) -> None:
        if not self._typing():
            self.app_state.toggle()

    def _shortcut_next(self) -> None:
        if not self._typing() and self.app_state.timer.is_running:
            self.app_state.skip()

    def _shortcut_fullscreen(self) -> None:
        if not self._typing():
            self.toggle_fullscreen()

    def toggle_fullscreen(self) -> None:
        if self.isFullScreen():
            self.showNormal()
            self.fullscreen_btn.setText("Fullscreen")
        else:
            self.showFullScreen()
            self.fullscreen_btn.setText("Exit")
