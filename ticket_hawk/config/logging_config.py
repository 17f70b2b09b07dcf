# ticket_hawk/config/logging_config.py

"""Logging setup for a single pipeline run.

Records from ``ticket_hawk.client``, ``ticket_hawk.rate_limiter``,
``ticket_hawk.storage``, ``ticket_hawk.health`` and ``ticket_hawk.cli`` all
propagate to the ``ticket_hawk`` logger, which writes them to
``logs/run_<YYYYmmdd_HHMMSS>.log``.  That file keeps rate-limit waits,
request URLs and SQLite writes at DEBUG; stderr only gets warnings such as
"Event not found" and API or network errors.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from ticket_hawk.config.settings import Settings

LOGGER_NAME = "ticket_hawk"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | "
    "%(message)s"
)
_STDERR_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _handler(
    handler: logging.Handler, level: int, fmt: str,
) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=_DATE_FORMAT))
    return handler


def setup_logging(logs_dir: Path | None = None) -> Path:
    """Attach the run-log and stderr handlers to ``ticket_hawk``.

    Returns the path of this run's log file.  When handlers are already
    attached they are left alone.
    """
    target_dir = logs_dir or Settings.LOGS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    log_file = target_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel(logging.DEBUG)
    if app_logger.handlers:
        return log_file

    app_logger.addHandler(_handler(
        logging.FileHandler(log_file, encoding="utf-8"),
        logging.DEBUG,
        _FILE_FORMAT,
    ))
    app_logger.addHandler(_handler(
        logging.StreamHandler(sys.stderr),
        logging.WARNING,
        _STDERR_FORMAT,
    ))
    app_logger.debug(
        "Run log opened at %s (db=%s)", log_file, Settings.DB_PATH,
    )
    return log_file
