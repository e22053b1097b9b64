import logging
import logging.handlers
import sys
from pathlib import Path
from typing import List

from cscompat.config import AppConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 5
QUIET_LOGGERS = ("werkzeug",)

# Marks handlers installed here so a second call replaces only those
HANDLER_TAG = "_cscompat_handler"


def _handlers(config: AppConfig) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    file_handler = logging.handlers.RotatingFileHandler(
        config.log_file,
        maxBytes=LOG_FILE_SIZE,
        backupCount=LOG_BACKUP_COUNT,
        encoding='utf-8'
    )
    # The file always gets the full detail; the console follows the config
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(config.log_level)

    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)
        setattr(handler, HANDLER_TAG, True)
    return [file_handler, console_handler]


def setup_logging(config: AppConfig) -> Path:
    """
    Send the root logger to `<log_dir>/cscompat.log` and stdout.
    Returns the log file path.
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    for handler in [h for h in root_logger.handlers if getattr(h, HANDLER_TAG, False)]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(config.log_level)
    for handler in _handlers(config):
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(f"Logging initialized. Log file: {config.log_file}")
    return config.log_file
