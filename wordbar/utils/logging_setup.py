"""
Logging setup for WordBar.

One rotating log file in the config directory plus console output. The
tray app has no console on most desktops, so the file is what a bug
report attaches.
"""
import os
import sys
import logging
import logging.handlers
from typing import Optional

from wordbar.config import Config
from wordbar.constants import VERSION

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(threadName)s: %(message)s'
LOG_FILE_NAME = 'wordbar.log'
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 3

# Chatty libraries kept at WARNING
QUIET_LOGGERS = ('PIL',)


def setup_logging(log_dir: Optional[str] = None, level: int = logging.INFO) -> str:
    """Attach file and console handlers to the root logger.

    Args:
        log_dir: Directory for the log file, defaults to <config dir>/logs
        level: Root logger level

    Returns:
        Path of the log file
    """
    log_dir = log_dir or os.path.join(Config.CONFIG_DIR, 'logs')
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, LOG_FILE_NAME)

    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding='utf-8',
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    sys.excepthook = _log_uncaught
    logging.info(f"WordBar v{VERSION} logging to {log_file}")
    return log_file


def _log_uncaught(exc_type, exc_value, exc_tb):
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    logging.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_tb))
