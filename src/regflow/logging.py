"""Centralized logging configuration for regflow.

Every component logs through a child of the ``regflow`` logger, so one
rotating file collects submissions, ledger commits and review decisions.
"""

from __future__ import annotations

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

from regflow.config import Settings

# Default configuration
DEFAULT_LOG_FILE = "regflow.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5

# Log format
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Local part and domain of a student e-mail address
_EMAIL_PATTERN = re.compile(r"([\w.+-]+)@([\w-]+(?:\.[\w-]+)+)")


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
    settings: Settings | None = None,
) -> logging.Logger:
    """Set up logging with rotating file handler.

    Args:
        log_dir: Directory for log files. Defaults to ``settings.log_dir``
                 (REGFLOW_LOG_DIR).
        log_file: Log file name. Defaults to 'regflow.log'.
        max_bytes: Maximum size per log file before rotation. Defaults to 10MB.
        backup_count: Number of backup files to keep. Defaults to 5.
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to
               ``settings.log_level`` (REGFLOW_LOG_LEVEL).
        console: Whether to also log to console. Defaults to True.
        settings: Engine settings supplying the defaults above. Read fresh
                  from the environment when omitted.

    Returns:
        The root regflow logger.
    """
    if log_dir is None or level is None:
        settings = settings or Settings()
        log_dir = log_dir if log_dir is not None else settings.log_dir
        level = level or settings.log_level

    # Create log directory if needed
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    log_level = getattr(logging, level.upper(), logging.INFO)

    # Get the regflow root logger; module loggers propagate to it
    logger = logging.getLogger("regflow")
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # Add rotating file handler
    log_path = log_dir / log_file
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # Add console handler if requested
    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.info("regflow logging initialized (level=%s, file=%s)", level, log_path)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a component.

    Args:
        name: Component name (e.g., 'api', 'ledger').
              Will be prefixed with 'regflow.'.

    Returns:
        Logger instance for the component.
    """
    if not name.startswith("regflow."):
        name = f"regflow.{name}"
    return logging.getLogger(name)


def sanitize_for_log(text: str) -> str:
    """Mask the local part of e-mail addresses in text destined for the log.

    The first character and the domain stay readable, so
    ``ada.obi@uni.edu.ng`` becomes ``a***@uni.edu.ng``.

    Args:
        text: Text that may contain student e-mail addresses.

    Returns:
        Sanitized text safe for logging.
    """
    return _EMAIL_PATTERN.sub(lambda m: f"{m.group(1)[0]}***@{m.group(2)}", text)
