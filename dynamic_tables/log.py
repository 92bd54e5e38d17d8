# ==============================================
# Logging Setup
# ==============================================
#
# Every module logs through logging.getLogger(__name__), so all
# package output flows through the "dynamic_tables" logger.
# These helpers configure that one logger: a console handler,
# an optional appending file handler, and a level that can be
# changed at runtime.
#
# Legacy level names are accepted for compatibility with older
# configuration files: SEVERE, FINE, FINER, FINEST, CONFIG.
#
# ==============================================

import logging
from typing import Optional, Union

PACKAGE_LOGGER = "dynamic_tables"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

_LEGACY_LEVELS = {
    "SEVERE": logging.ERROR,
    "CONFIG": logging.INFO,
    "FINE": logging.DEBUG,
    "FINER": logging.DEBUG,
    "FINEST": logging.DEBUG,
    "ALL": logging.NOTSET,
    "OFF": logging.CRITICAL + 10,
}

_file_handler: Optional[logging.FileHandler] = None


def parse_level(level: Union[str, int]) -> int:
    """Turn a level name (Python or legacy) or number into a logging level."""
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name in _LEGACY_LEVELS:
        return _LEGACY_LEVELS[name]
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ValueError(f"Invalid log level: {level}")
    return value


def setup_logging(
    level: Union[str, int] = "ERROR",
    log_to_file: bool = False,
    log_file: str = "dynamic_tables.log"
) -> logging.Logger:
    """
    Configure the package logger.

    Existing console handlers are replaced so repeated calls don't
    duplicate output. The file handler is added once and removed
    (and closed) when log_to_file is turned off again.
    """
    global _file_handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    numeric_level = parse_level(level)
    logger.setLevel(numeric_level)
    formatter = logging.Formatter(LOG_FORMAT)

    for handler in list(logger.handlers):
        if handler is not _file_handler:
            logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(numeric_level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_to_file and _file_handler is None:
        _file_handler = logging.FileHandler(log_file, mode="a")
        _file_handler.setFormatter(formatter)
        logger.addHandler(_file_handler)
    elif not log_to_file and _file_handler is not None:
        logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None

    if _file_handler is not None:
        _file_handler.setLevel(numeric_level)

    logger.info(f"Logging level set to {logging.getLevelName(numeric_level)}")
    if _file_handler is not None:
        logger.info(f"File logging enabled ({_file_handler.baseFilename})")
    return logger


def change_log_level(level_name: str) -> bool:
    """
    Change the level of the package logger and all of its handlers.

    Returns:
        False (and logs an error) if level_name is not a known level.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    try:
        numeric_level = parse_level(level_name)
    except ValueError:
        logger.error(f"Invalid log level: {level_name}")
        return False

    logger.setLevel(numeric_level)
    for handler in logger.handlers:
        handler.setLevel(numeric_level)
    logger.info(f"Log level changed to {level_name.upper()}")
    return True
