"""
PactStub Logging Helpers

Opt-in logger construction. The library never configures logging
process-wide; callers either inject their own logger into a Stub or build
one here.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union


LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_FILE_NAME = 'pactstub.log'
LOG_FILE_MAX_BYTES = 10_000_000
LOG_FILE_BACKUP_COUNT = 5


def resolve_level(level: Union[str, int, None]) -> int:
    """Translate a level name such as "info" into a logging level number."""
    if isinstance(level, int):
        return level
    if not level:
        return logging.INFO
    return getattr(logging, str(level).upper(), logging.INFO)


def create_stub_logger(
    log_dir: Optional[Union[str, Path]] = None,
    name: str = 'pactstub.stub',
    level: Union[str, int] = 'info',
    console: bool = True
) -> logging.Logger:
    """
    Build a logger writing to the console and, optionally, to a rotating file.

    Args:
        log_dir: Directory for the rotating log file (no file when None)
        name: Logger name
        level: Log level name or number
        console: Attach a stream handler

    Returns:
        Configured logger

    Example:
        logger = create_stub_logger('./stub')
        stub = Stub.create(9000, logger=logger)
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(level))
    formatter = logging.Formatter(LOG_FORMAT)

    # Avoid stacking handlers when called twice for the same logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            directory / LOG_FILE_NAME,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
