"""Application-wide logger writing to platformdirs user_log_dir."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

_APP_NAME = "studyfocus"
_LOG_FILE = "studyfocus.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_logger: logging.Logger | None = None


def get_logger(console: bool = False, log_dir: Path | None = None) -> logging.Logger:
    """Return the root `studyfocus` logger, initialising it on first call.

    Module loggers created with ``logging.getLogger(__name__)`` inside the
    package are children of this one and share its handlers.
    """
    global _logger
    if _logger is not None:
        return _logger

    log_dir = log_dir or Path(user_log_dir(_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    logger = logging.getLogger(_APP_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    if not logger.handlers:
        handler = logging.handlers.RotatingFileHandler(
            log_dir / _LOG_FILE,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)

        if console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.DEBUG)
            console_handler.setFormatter(fmt)
            logger.addHandler(console_handler)

    _logger = logger
    return _logger
