"""Logging utilities for the peg engine."""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "peg_engine"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Optional[str] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Attach console (and optional file) handlers to an engine logger.
    
    Engine modules only call ``logging.getLogger(__name__)``; applications
    call this once so that policy decisions end up in an auditable log.
    
    Args:
        name: Logger name (defaults to the package root logger)
        level: Log level; falls back to ``settings.log_level``
        log_file: Optional file path to also write records to
    
    Returns:
        Configured logger
    """
    if level is None:
        from peg_engine.config.settings import settings
        level = settings.log_level
    
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))
    
    # Calling twice must not duplicate output
    if logger.handlers:
        return logger
    
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)
    
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    
    return logger
