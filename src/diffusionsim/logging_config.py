"""
Logging Configuration
=====================
Sets up the 'diffusionsim' logger for headless runs.

Two threads log at the same time (the caller and the manager worker), and a
tick lasts a few milliseconds, so every record carries the thread name and a
millisecond timestamp. The console shows the requested level; an optional log
file always receives DEBUG records so a run can be inspected afterwards.
"""
import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s.%(msecs)03d [%(threadName)s] %(name)s %(levelname)s: %(message)s'
DATE_FORMAT = '%H:%M:%S'


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the logger of the 'diffusionsim' namespace.

    Args:
        level: Console level (e.g. logging.DEBUG, logging.INFO).
        log_file: Optional path of a log file, written at DEBUG level.
    """
    logger = logging.getLogger("diffusionsim")
    logger.setLevel(logging.DEBUG if log_file else level)

    # Calling setup again (CLI re-entry, tests) replaces the handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug(f"Logging initialized (console level {logging.getLevelName(level)}, file {log_file or 'none'}).")
