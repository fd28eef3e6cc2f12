"""Logging configuration for directory_link."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from ..config.models import LoggingConfig

LOGGER_NAME = "directory_link"


def setup_logging(config: LoggingConfig) -> logging.Logger:
    """
    Configure the package logger from a LoggingConfig.

    Session audit lines go to the same handlers through the
    directory_link.audit child logger. ldap3's own logging stays at WARNING.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.level)
    logger.handlers.clear()

    handlers = [logging.StreamHandler(sys.stdout)]
    if config.file:
        log_file = Path(config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding='utf-8'
        ))

    formatter = logging.Formatter(config.format)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logging.getLogger("ldap3").setLevel(logging.WARNING)

    logger.debug(f"Logging initialized at level: {config.level}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger below the package logger.
    
    Args:
        name: Logger name
        
    Returns:
        Logger instance
    """
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def log_session_event(operation: str, domain: str, success: bool, details: Optional[str] = None) -> None:
    """
    Log a session lifecycle event for audit purposes.
    
    Args:
        operation: Event type (bind, export, resume, redirect)
        domain: Directory server the session points at
        success: Whether the operation succeeded
        details: Additional details, never credentials
    """
    logger = get_logger("audit")
    
    status = "SUCCESS" if success else "FAILED"
    message = f"SESSION {operation.upper()} {status}: {domain}"
    
    if details:
        message += f" - {details}"
    
    if success:
        logger.info(message)
    else:
        logger.warning(message)
