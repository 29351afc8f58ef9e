from __future__ import annotations

"""Entry point of the study focus timer.

Sets up logging, opens the SQLite storage, loads the application state and
shows the main window.
"""

import argparse
import logging
import sys
from pathlib import Path

from PyQt6.QtWidgets import QApplication

from studyfocus.common.logger import get_logger
from studyfocus.core.app_state import AppState
from studyfocus.data.storage import Storage, default_db_path
from studyfocus.ui.main_window import MainWindow
from studyfocus.ui.scheduler import QtScheduler
from studyfocus.ui.styles import apply_theme


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="studyfocus", description="Pomodoro focus timer")
    parser.add_argument("--db", type=Path, default=None, help="path to the SQLite database")
    parser.add_argument("--debug", action="store_true", help="also log to the console")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    log = get_logger(console=args.debug)
    log.setLevel(logging.DEBUG if args.debug else logging.INFO)
    log.info("=== Starting studyfocus ===")
    try:
        return run(args.db)
    except Exception:
        log.exception("Uncaught exception in entrypoint, exiting")
        return 1


def run(db_path: Path | None) -> int:
    app = QApplication(sys.argv[:1])
    apply_theme(app)

    storage = Storage(db_path or default_db_path())
    storage.init_db()

    app_state = AppState(scheduler=QtScheduler(app))
    app_state.load_from_storage(storage)

    window = MainWindow(app_state=app_state)
    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
