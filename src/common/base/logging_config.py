"""
Logging setup for blogdesk.

Modules get their logger through get_logger(__name__). The launcher calls
configure_logging() once; after that every record goes to the console and
to a rotating file under constants.LOG_DIR, with file, line and function
in each line.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

import constants

# Loggers that follow app_log_level instead of the root level
APP_LOGGER_NAMES = ('blogdesk', 'common', 'models')

# Libraries that are chatty at DEBUG: PIL logs every decoder chunk,
# urllib3 every pooled connection
QUIET_LOGGER_NAMES = ('PIL', 'urllib3', 'waitress.queue')

DEFAULT_LOG_FILENAME = 'blogdesk.log'

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d:%(funcName)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level

def configure_logging(
    log_level: str = "INFO",
    app_log_level: str = "DEBUG",
    log_filename: Optional[str] = None
) -> Path:
    """
    Route all logging to the console and a rotating log file.

    Calling it again replaces the handlers rather than adding to them.

    Args:
        log_level: Level for the root logger and third-party libraries
        app_log_level: Level for the blogdesk, common and models loggers
        log_filename: File name under LOG_DIR, defaults to blogdesk.log

    Returns:
        Path of the log file
    """
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    root_logger = logging.getLogger()
    root_logger.setLevel(_level(log_level))

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    log_dir = Path(constants.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file_path = log_dir / (log_filename or DEFAULT_LOG_FILENAME)

    handlers = [
        logging.StreamHandler(),
        logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=1024 * 1024,
            backupCount=10,
            encoding='utf-8'
        ),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    app_level = _level(app_log_level)
    for name in APP_LOGGER_NAMES:
        logging.getLogger(name).setLevel(app_level)
    for name in QUIET_LOGGER_NAMES:
        logging.getLogger(name).setLevel(max(logging.INFO, _level(log_level)))

    logging.info(f"Logging initialized: root_level={log_level}, app_level={app_log_level}, log_file={log_file_path}")
    return log_file_path

def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass __name__."""
    return logging.getLogger(name)
