"""Logging configuration for toolkeeper."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from utils import constants

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _own_handlers(root_logger: logging.Logger) -> List[logging.Handler]:
    return [h for h in root_logger.handlers if getattr(h, "_toolkeeper", False)]


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console_level: int = logging.WARNING,
) -> None:
    """
    Set up logging with rotating file handler.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Level for the log file (default: INFO)
        log_file: Override for the log file location
        console_level: Level for stderr output (default: WARNING)
    """
    log_file = log_file or constants.LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # File handler with rotation (3 files, 1MB each)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=1048576,  # 1MB
        backupCount=3,
        encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    console_handler._toolkeeper_console = True

    root_logger = logging.getLogger()
    root_logger.setLevel(min(level, console_level))
    for handler in _own_handlers(root_logger):
        root_logger.removeHandler(handler)
        handler.close()
    for handler in (file_handler, console_handler):
        handler._toolkeeper = True
        root_logger.addHandler(handler)

    logging.info("=" * 60)
    logging.info(f"{constants.APP_NAME} {constants.APP_VERSION} - Logging initialized")
    logging.info(f"Log file: {log_file}")
    logging.info("=" * 60)


def set_console_level(level: int) -> None:
    """Change how much reaches stderr, e.g. DEBUG for ``--verbose``."""
    root_logger = logging.getLogger()
    for handler in _own_handlers(root_logger):
        if getattr(handler, "_toolkeeper_console", False):
            handler.setLevel(level)
    if root_logger.level > level or root_logger.level == logging.NOTSET:
        root_logger.setLevel(level)
